"""Lightweight description of one remote content item."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from content_importer.manifest.content_type import ContentType
from content_importer.utils.serialization import (
    build_model,
    ensure_aware,
    format_datetime,
    parse_datetime,
    require_fields,
)


class ManifestItem(BaseModel):
    """Metadata for a remote item whose full body has not been fetched.

    Items are immutable once built. ``parent_id`` refers to another item of
    the same manifest and forms reply/thread trees.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Unique ID within the source")
    type: ContentType
    title: str
    created_at: datetime
    excerpt: str | None = None
    updated_at: datetime | None = None
    media_urls: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    parent_id: str | None = None
    original_url: str | None = None
    author: dict[str, Any] | None = Field(
        None, description="Author as {name, url}"
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def timestamps_aware(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value) if value is not None else None

    def has_media(self) -> bool:
        return len(self.media_urls) > 0

    def has_parent(self) -> bool:
        return self.parent_id is not None

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def to_array(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "excerpt": self.excerpt,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
            "media_urls": list(self.media_urls),
            "metadata": dict(self.metadata),
            "parent_id": self.parent_id,
            "original_url": self.original_url,
            "author": dict(self.author) if self.author is not None else None,
        }

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "ManifestItem":
        """Rebuild an item from its serialized form.

        Raises:
            MissingRequiredFieldError: If id, type, title or created_at is absent.
            ValidationError: If a present value is malformed.
        """
        require_fields("ManifestItem", data, ("id", "type", "title", "created_at"))

        updated_at = data.get("updated_at")
        return build_model(
            cls,
            {
                "id": data["id"],
                "type": data["type"],
                "title": data["title"],
                "created_at": parse_datetime(data["created_at"], "created_at"),
                "excerpt": data.get("excerpt"),
                "updated_at": (
                    parse_datetime(updated_at, "updated_at")
                    if updated_at is not None
                    else None
                ),
                "media_urls": data.get("media_urls") or [],
                "metadata": data.get("metadata") or {},
                "parent_id": data.get("parent_id"),
                "original_url": data.get("original_url"),
                "author": data.get("author"),
            },
        )
