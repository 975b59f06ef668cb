"""Mastodon normalizer for statuses returned by the REST API."""

from typing import Any, Optional

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.normalizer.media import MediaReference, MediaType, media_id_for_url
from content_importer.utils.serialization import build_model

ATTACHMENT_TYPES = {
    "image": MediaType.IMAGE,
    "gifv": MediaType.VIDEO,
    "video": MediaType.VIDEO,
    "audio": MediaType.AUDIO,
}


class MastodonNormalizer(ContentNormalizer):
    """Normalizes statuses, boosts and replies."""

    adapter_id = "mastodon"

    def get_adapter_id(self) -> str:
        return self.adapter_id

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedItem:
        reblog = raw_item.get("reblog") if isinstance(raw_item.get("reblog"), dict) else None
        status = reblog or raw_item
        account = raw_item.get("account") or {}

        content = self.clean_content(status.get("content") or "")
        tags = [tag.get("name") for tag in status.get("tags") or [] if tag.get("name")]
        mentions = [m.get("acct") for m in status.get("mentions") or [] if m.get("acct")]

        engagement = self.extract_engagement(status)
        for metric, key in (("shares", "reblogs_count"), ("comments", "replies_count")):
            if metric not in engagement:
                engagement.update(self.extract_engagement({metric: status.get(key)}))

        metadata: dict[str, Any] = {
            "visibility": raw_item.get("visibility"),
            "language": status.get("language"),
            "sensitive": bool(status.get("sensitive")),
            "spoiler_text": status.get("spoiler_text") or None,
            "mentions": mentions,
        }
        if reblog is not None:
            metadata["reblog_of"] = reblog.get("url") or reblog.get("uri")
            metadata["reblog_author"] = (reblog.get("account") or {}).get("acct")

        in_reply_to = raw_item.get("in_reply_to_id")

        return build_model(
            NormalizedItem,
            {
                "source_id": str(raw_item.get("id") or ""),
                "source_adapter": self.adapter_id,
                "content_type": self.determine_content_type(raw_item),
                "content": content,
                "publish_date": self.convert_date(str(raw_item.get("created_at") or "")),
                "source_url": raw_item.get("url") or raw_item.get("uri"),
                "media": self._attachments(status),
                "engagement": engagement,
                "author_name": account.get("display_name") or account.get("username"),
                "author_url": account.get("url"),
                "parent_id": str(in_reply_to) if in_reply_to else None,
                "tags": tags or self.extract_hashtags(self.sanitizer.extract_text(content)),
                "metadata": metadata,
            },
        )

    def determine_content_type(self, raw_item: dict[str, Any]) -> ContentType:
        if raw_item.get("reblog"):
            return ContentType.REPOST
        if raw_item.get("in_reply_to_id"):
            own_account = (raw_item.get("account") or {}).get("id")
            if own_account and raw_item.get("in_reply_to_account_id") == own_account:
                return ContentType.THREAD
            return ContentType.REPLY
        return ContentType.POST

    def _attachments(self, status: dict[str, Any]) -> list[MediaReference]:
        references = []
        for attachment in status.get("media_attachments") or []:
            url = attachment.get("url") or attachment.get("remote_url")
            if not url:
                continue

            width, height = self._dimensions(attachment)
            references.append(
                MediaReference(
                    id=media_id_for_url(url),
                    source_url=url,
                    type=ATTACHMENT_TYPES.get(
                        attachment.get("type"), MediaReference.detect_type_from_url(url)
                    ),
                    alt_text=attachment.get("description") or None,
                    width=width,
                    height=height,
                    metadata={
                        "attachment_id": attachment.get("id"),
                        "preview_url": attachment.get("preview_url"),
                        "blurhash": attachment.get("blurhash"),
                    },
                )
            )
        return references

    @staticmethod
    def _dimensions(attachment: dict[str, Any]) -> tuple[Optional[int], Optional[int]]:
        original = (attachment.get("meta") or {}).get("original") or {}
        width, height = original.get("width"), original.get("height")
        if isinstance(width, int) and isinstance(height, int):
            return width, height
        return None, None
