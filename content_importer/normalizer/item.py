"""Canonical representation of one imported content item."""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.html_sanitizer import strip_all_tags
from content_importer.normalizer.media import MediaReference, MediaType
from content_importer.utils.serialization import (
    build_model,
    ensure_aware,
    format_datetime,
    parse_datetime,
    require_fields,
)

ENGAGEMENT_KEYS = ("likes", "shares", "comments", "views", "bookmarks")

_WORD_RE = re.compile(r"[^\W\d_]+(?:['-][^\W\d_]+)*")

EXCERPT_LENGTH = 150
TITLE_LENGTH = 60
# Snap back to a word boundary only past this share of the cut length
WORD_BOUNDARY_RATIO = 0.8


class NormalizedItem(BaseModel):
    """Platform-independent content ready for import.

    Built once by a normalizer. Afterwards only ``add_media`` and
    ``set_meta`` change it. Text statistics are computed from ``content``
    on demand and never stored.
    """

    # Identification
    source_id: str = Field(..., min_length=1, description="ID on the origin platform")
    source_adapter: str = Field(..., min_length=1, description="Adapter that produced the item")
    content_type: ContentType

    # Core content
    content: str = Field(..., description="Sanitized HTML body")
    publish_date: datetime
    title: str | None = None
    source_url: str | None = None
    media: list[MediaReference] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    # Engagement counters, only those the platform reported
    engagement: dict[str, int] = Field(default_factory=dict)

    # Author info
    author_name: str | None = None
    author_url: str | None = None
    parent_id: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("publish_date")
    @classmethod
    def publish_date_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("engagement")
    @classmethod
    def engagement_not_negative(cls, value: dict[str, int]) -> dict[str, int]:
        negative = [key for key, count in value.items() if count < 0]
        if negative:
            raise ValueError(f"engagement counts must be non-negative: {', '.join(negative)}")
        return value

    # -------------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------------

    def add_media(self, media_ref: MediaReference) -> None:
        self.media.append(media_ref)

    def has_media(self) -> bool:
        return len(self.media) > 0

    def get_media_count(self) -> int:
        return len(self.media)

    def get_media_by_type(self, media_type: MediaType | str) -> list[MediaReference]:
        media_type = MediaType(media_type)
        return [ref for ref in self.media if ref.type == media_type]

    def get_images(self) -> list[MediaReference]:
        return self.get_media_by_type(MediaType.IMAGE)

    def get_videos(self) -> list[MediaReference]:
        return self.get_media_by_type(MediaType.VIDEO)

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def get_plain_text(self) -> str:
        return strip_all_tags(self.content)

    def get_word_count(self) -> int:
        return len(_WORD_RE.findall(self.get_plain_text()))

    def get_character_count(self) -> int:
        return len(self.get_plain_text())

    def get_excerpt(self, length: int = EXCERPT_LENGTH) -> str:
        """Plain-text excerpt of at most ``length`` characters plus ``...``.

        The cut moves back to the last space only when that space lies
        strictly beyond 80% of ``length``; otherwise the text is cut hard.
        """
        text = self.get_plain_text()
        if len(text) <= length:
            return text

        text = text[:length]
        last_space = text.rfind(" ")
        if last_space != -1 and last_space > length * WORD_BOUNDARY_RATIO:
            text = text[:last_space]

        return text + "..."

    def generate_title(self, max_length: int = TITLE_LENGTH) -> str:
        """The title when set, otherwise an excerpt of the content."""
        if self.title:
            return self.title
        return self.get_excerpt(max_length)

    # -------------------------------------------------------------------------
    # Relations, tags, engagement, metadata
    # -------------------------------------------------------------------------

    def is_reply(self) -> bool:
        return self.parent_id is not None

    def has_tags(self) -> bool:
        return len(self.tags) > 0

    def get_engagement(self, key: str, default: int = 0) -> int:
        return self.engagement.get(key, default)

    def get_total_engagement(self) -> int:
        return sum(self.engagement.values())

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def set_meta(self, key: str, value: Any) -> None:
        self.metadata[key] = value

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_array(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "source_adapter": self.source_adapter,
            "content_type": self.content_type.value,
            "content": self.content,
            "title": self.title,
            "publish_date": format_datetime(self.publish_date),
            "source_url": self.source_url,
            "media": [ref.to_array() for ref in self.media],
            "metadata": dict(self.metadata),
            "engagement": dict(self.engagement),
            "author_name": self.author_name,
            "author_url": self.author_url,
            "parent_id": self.parent_id,
            "tags": list(self.tags),
        }

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "NormalizedItem":
        """Rebuild an item from its serialized form.

        Raises:
            MissingRequiredFieldError: If an identity field is absent.
            ValidationError: If a present value is malformed.
        """
        require_fields(
            "NormalizedItem",
            data,
            ("source_id", "source_adapter", "content_type", "content", "publish_date"),
        )

        media = [
            ref if isinstance(ref, MediaReference) else MediaReference.from_array(ref)
            for ref in data.get("media") or []
        ]

        return build_model(
            cls,
            {
                "source_id": data["source_id"],
                "source_adapter": data["source_adapter"],
                "content_type": data["content_type"],
                "content": data["content"],
                "publish_date": parse_datetime(data["publish_date"], "publish_date"),
                "title": data.get("title"),
                "source_url": data.get("source_url"),
                "media": media,
                "metadata": data.get("metadata") or {},
                "engagement": data.get("engagement") or {},
                "author_name": data.get("author_name"),
                "author_url": data.get("author_url"),
                "parent_id": data.get("parent_id"),
                "tags": data.get("tags") or [],
            },
        )
