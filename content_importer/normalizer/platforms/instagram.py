"""Instagram normalizer.

Accepts both Graph API media objects (``id``, ``caption``, ``media_type``,
``media_url``, ``children``) and entries of the account data export
(``posts_1.json``: ``media`` list with ``uri``, ``creation_timestamp``).
"""

import html
from typing import Any, Optional
from urllib.parse import urljoin

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.utils.serialization import build_model

INSTAGRAM_BASE_URL = "https://www.instagram.com"
HASHTAG_BASE_URL = f"{INSTAGRAM_BASE_URL}/explore/tags"

DATE_KEYS = ("timestamp", "taken_at", "creation_timestamp")


def repair_export_text(text: str) -> str:
    """Undo the export's UTF-8-as-Latin-1 escaping (``\\u00c3\\u00a9`` for ``é``)."""
    try:
        return text.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text


def post_id(raw_item: dict[str, Any]) -> str:
    """API id, or the first media path for export entries that carry no id."""
    value = raw_item.get("id") or raw_item.get("pk")
    export_media = raw_item.get("media")
    if value is None and isinstance(export_media, list) and export_media:
        value = export_media[0].get("uri")
    return str(value) if value is not None else ""


class InstagramNormalizer(ContentNormalizer):
    """Normalizes Instagram posts, carousels, videos and stories.

    Args:
        media_base_url: Base that relative export media paths are joined to.
        sanitizer: HTML sanitizer.
        date_converter: Date parser.
    """

    adapter_id = "instagram_export"

    def __init__(
        self,
        media_base_url: Optional[str] = None,
        sanitizer: Optional[HtmlSanitizer] = None,
        date_converter: Optional[DateConverter] = None,
    ):
        super().__init__(sanitizer, date_converter)
        self.media_base_url = media_base_url

    def get_adapter_id(self) -> str:
        return self.adapter_id

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedItem:
        export_media = raw_item.get("media") if isinstance(raw_item.get("media"), list) else []
        caption = self._caption(raw_item, export_media)
        media_urls = self._media_urls(raw_item, export_media)

        username = raw_item.get("username") or raw_item.get("owner_username")
        author = self.extract_author(raw_item)

        engagement = self.extract_engagement(raw_item)
        if "comments" not in engagement:
            comments = self.extract_engagement({"comments": raw_item.get("comments_count")})
            engagement.update(comments)

        return build_model(
            NormalizedItem,
            {
                "source_id": post_id(raw_item),
                "source_adapter": self.adapter_id,
                "content_type": self.determine_content_type(raw_item),
                "content": self.clean_content(self._render(caption)),
                "publish_date": self.convert_date(self._raw_date(raw_item, export_media)),
                "source_url": self.build_source_url(raw_item),
                "media": self.extract_media_from_urls(media_urls),
                "engagement": engagement,
                "author_name": author["name"],
                "author_url": author["url"]
                or (f"{INSTAGRAM_BASE_URL}/{username}/" if username else None),
                "tags": self.extract_hashtags(caption),
                "metadata": {
                    "media_type": raw_item.get("media_type"),
                    "mentions": self.extract_mentions(caption),
                    "location": raw_item.get("location"),
                },
            },
        )

    def determine_content_type(self, raw_item: dict[str, Any]) -> ContentType:
        media_type = str(raw_item.get("media_type") or "").upper()
        product_type = str(raw_item.get("media_product_type") or "").upper()
        export_media = raw_item.get("media") if isinstance(raw_item.get("media"), list) else []

        if product_type == "STORY" or raw_item.get("is_story"):
            return ContentType.STORY
        if media_type == "VIDEO" or product_type == "REELS":
            return ContentType.VIDEO
        if media_type == "CAROUSEL_ALBUM" or len(export_media) > 1:
            return ContentType.MEDIA
        return ContentType.POST

    def _render(self, caption: str) -> str:
        body = html.escape(caption, quote=False)
        body = self.sanitizer.linkify_entities(body, INSTAGRAM_BASE_URL, HASHTAG_BASE_URL, urls=False)
        return self.text_to_html(body)

    @staticmethod
    def _caption(raw_item: dict[str, Any], export_media: list[dict[str, Any]]) -> str:
        caption = raw_item.get("caption")
        if isinstance(caption, dict):
            caption = caption.get("text")
        if caption:
            return str(caption)

        title = raw_item.get("title") or next(
            (entry.get("title") for entry in export_media if entry.get("title")), ""
        )
        return repair_export_text(title) if title else ""

    def _media_urls(
        self,
        raw_item: dict[str, Any],
        export_media: list[dict[str, Any]],
    ) -> list[str]:
        urls: list[str] = []
        children = (raw_item.get("children") or {}).get("data") or []
        if children:
            urls.extend(child.get("media_url") for child in children if child.get("media_url"))
        elif raw_item.get("media_url"):
            urls.append(raw_item["media_url"])

        for entry in export_media:
            uri = entry.get("uri")
            if uri:
                urls.append(urljoin(self.media_base_url, uri) if self.media_base_url else uri)

        return list(dict.fromkeys(urls))

    @staticmethod
    def _raw_date(raw_item: dict[str, Any], export_media: list[dict[str, Any]]) -> str:
        for key in DATE_KEYS:
            value = raw_item.get(key)
            if value is not None and value != "":
                return str(value)
        for entry in export_media:
            if entry.get("creation_timestamp") is not None:
                return str(entry["creation_timestamp"])
        return ""
