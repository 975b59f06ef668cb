"""Keyed collection of manifest items for one source fetch."""

from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from content_importer.manifest.content_type import ContentType
from content_importer.manifest.manifest_item import ManifestItem
from content_importer.utils.serialization import (
    format_datetime,
    parse_datetime,
    require_fields,
)


class ContentManifest:
    """Items available from a source, keyed by id in insertion order.

    Adding an item whose id is already present replaces it in place.

    Args:
        source_id: Adapter id the manifest was built by.
    """

    def __init__(self, source_id: str):
        self.source_id = source_id
        self.generated_at = datetime.now(timezone.utc)
        self._items: dict[str, ManifestItem] = {}

    def add_item(self, item: ManifestItem) -> None:
        self._items[item.id] = item

    def remove_item(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    def get_item(self, item_id: str) -> Optional[ManifestItem]:
        return self._items.get(item_id)

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get_items(self) -> list[ManifestItem]:
        return list(self._items.values())

    def get_items_by_type(self, content_type: ContentType) -> list[ManifestItem]:
        return [item for item in self._items.values() if item.type == content_type]

    def get_items_with_media(self) -> list[ManifestItem]:
        return [item for item in self._items.values() if item.has_media()]

    def get_date_range(self) -> dict[str, Optional[datetime]]:
        """Earliest and latest ``created_at`` over all items.

        Returns:
            ``{"earliest": ..., "latest": ...}``, both None when empty.
        """
        if not self._items:
            return {"earliest": None, "latest": None}

        # sorted() is stable, so equal timestamps keep insertion order
        dates = sorted(item.created_at for item in self._items.values())
        return {"earliest": dates[0], "latest": dates[-1]}

    def get_stats(self) -> dict[str, Any]:
        """Counts of all items, items with media and items per type.

        Types with no items are left out of ``by_type``.
        """
        by_type: dict[str, int] = {}
        for item in self._items.values():
            by_type[item.type.value] = by_type.get(item.type.value, 0) + 1

        return {
            "total": len(self._items),
            "with_media": len(self.get_items_with_media()),
            "by_type": by_type,
        }

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ManifestItem]:
        return iter(list(self._items.values()))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def to_array(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "generated_at": format_datetime(self.generated_at),
            "stats": self.get_stats(),
            "items": [item.to_array() for item in self._items.values()],
        }

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "ContentManifest":
        """Rebuild a manifest; ``stats`` is recomputed rather than read.

        Raises:
            MissingRequiredFieldError: If source_id is absent.
        """
        require_fields("ContentManifest", data, ("source_id",))

        manifest = cls(data["source_id"])
        if data.get("generated_at") is not None:
            manifest.generated_at = parse_datetime(data["generated_at"], "generated_at")

        items = data.get("items")
        if isinstance(items, list):
            for item_data in items:
                manifest.add_item(ManifestItem.from_array(item_data))

        return manifest

    def __repr__(self) -> str:
        return f"ContentManifest(source_id={self.source_id!r}, items={len(self._items)})"
