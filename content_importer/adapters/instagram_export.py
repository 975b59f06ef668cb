"""Instagram data export adapter."""

import json
from typing import Any

from content_importer.adapters.file_export import FileExportAdapter
from content_importer.adapters.registry import register_adapter_class
from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.platforms.instagram import InstagramNormalizer, post_id

# Top-level keys wrapping the entry list in the various export files
_WRAPPER_KEYS = ("ig_posts", "posts", "ig_stories", "ig_reels_media", "data")


@register_adapter_class("instagram_export")
class InstagramExportAdapter(FileExportAdapter):
    """Imports posts, reels and stories from an Instagram data download."""

    def get_id(self) -> str:
        return "instagram_export"

    def get_name(self) -> str:
        return "Instagram Export"

    def get_description(self) -> str:
        return "Import posts, reels and stories from an Instagram data download (JSON format)."

    def get_icon(self) -> str:
        return "instagram"

    def get_supported_content_types(self) -> list[ContentType]:
        return [ContentType.POST, ContentType.MEDIA, ContentType.VIDEO, ContentType.STORY]

    def default_normalizer(self) -> ContentNormalizer:
        return InstagramNormalizer()

    def parse_export(self, text: str) -> list[dict[str, Any]]:
        data = json.loads(text)
        if isinstance(data, dict):
            for key in _WRAPPER_KEYS:
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
            else:
                data = [data]
        return self.entry_list(data)

    def entry_id(self, entry: dict[str, Any]) -> str:
        return post_id(entry)
