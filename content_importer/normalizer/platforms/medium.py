"""Medium normalizer for exported or feed-sourced articles."""

from typing import Any

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.utils.serialization import build_model

DATE_KEYS = ("published_at", "firstPublishedAt", "pubDate", "created_at", "date")
CONTENT_KEYS = ("content", "content_html", "content:encoded", "body")


class MediumNormalizer(ContentNormalizer):
    """Normalizes Medium articles into ARTICLE items."""

    adapter_id = "medium"

    def get_adapter_id(self) -> str:
        return self.adapter_id

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedItem:
        body = next((raw_item[key] for key in CONTENT_KEYS if raw_item.get(key)), "")
        content = self.clean_content(body)

        source_url = self.build_source_url(raw_item)
        source_id = raw_item.get("id") or raw_item.get("guid") or source_url or ""

        title = raw_item.get("title")
        tags = raw_item.get("tags") or raw_item.get("categories") or []

        engagement = self.extract_engagement(raw_item)
        claps = raw_item.get("claps")
        if "likes" not in engagement and isinstance(claps, int) and not isinstance(claps, bool):
            engagement["likes"] = max(claps, 0)

        author = self.extract_author(raw_item)
        if author["name"] is None and raw_item.get("creator"):
            author = {"name": raw_item["creator"], "url": None}

        return build_model(
            NormalizedItem,
            {
                "source_id": str(source_id),
                "source_adapter": self.adapter_id,
                "content_type": ContentType.ARTICLE,
                "content": content,
                "title": self.sanitizer.extract_text(title) if title else None,
                "publish_date": self.convert_date(self._raw_date(raw_item)),
                "source_url": source_url,
                "media": self.extract_media_from_html(content),
                "engagement": engagement,
                "author_name": author["name"],
                "author_url": author["url"],
                "tags": [str(tag) for tag in tags if tag],
                "metadata": {
                    "subtitle": raw_item.get("subtitle"),
                    "reading_time": raw_item.get("reading_time") or raw_item.get("readingTime"),
                },
            },
        )

    @staticmethod
    def _raw_date(raw_item: dict[str, Any]) -> str:
        for key in DATE_KEYS:
            value = raw_item.get(key)
            if value is not None and value != "":
                return str(value)
        return ""
