"""Base normalizer interface.

All platform normalizers extend ContentNormalizer and implement
``get_adapter_id`` and ``normalize``. The shared helpers delegate to the
functions in ``content_importer.normalizer.extraction``, bound to the
injected sanitizer and date converter.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable, Optional

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer import extraction
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.normalizer.media import MediaReference


class ContentNormalizer(ABC):
    """Abstract base class for platform normalizers.

    Args:
        sanitizer: HTML sanitizer. A default one is built when omitted.
        date_converter: Date parser. A UTC converter is built when omitted.
    """

    def __init__(
        self,
        sanitizer: Optional[HtmlSanitizer] = None,
        date_converter: Optional[DateConverter] = None,
    ):
        self.sanitizer = sanitizer or HtmlSanitizer()
        self.date_converter = date_converter or DateConverter()

    @abstractmethod
    def get_adapter_id(self) -> str:
        """Id of the adapter whose payloads this normalizer understands."""
        ...

    @abstractmethod
    def normalize(self, raw_item: dict[str, Any]) -> NormalizedItem:
        """Convert one raw payload.

        Args:
            raw_item: Platform payload as fetched by the adapter.

        Returns:
            The normalized item.

        Raises:
            ParseError: If the payload's publish date cannot be parsed.
            ValidationError: If identity fields are missing.
        """
        ...

    def supports(self, adapter_id: str) -> bool:
        return self.get_adapter_id() == adapter_id

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def clean_content(self, html: str) -> str:
        return extraction.clean_content(html, self.sanitizer)

    def convert_date(self, date_string: str, fmt: Optional[str] = None) -> datetime:
        return extraction.convert_date(date_string, self.date_converter, fmt)

    def extract_media_from_html(self, html: str) -> list[MediaReference]:
        return extraction.extract_media_from_html(html, self.sanitizer)

    def extract_media_from_urls(self, urls: Iterable[Optional[str]]) -> list[MediaReference]:
        return extraction.extract_media_from_urls(urls)

    def is_media_url(self, url: str) -> bool:
        return extraction.is_media_url(url)

    def extract_hashtags(self, text: str) -> list[str]:
        return extraction.extract_hashtags(text)

    def extract_mentions(self, text: str) -> list[str]:
        return extraction.extract_mentions(text)

    def determine_content_type(self, raw_item: dict[str, Any]) -> ContentType:
        return extraction.determine_content_type(raw_item)

    def extract_engagement(self, raw_item: dict[str, Any]) -> dict[str, int]:
        return extraction.extract_engagement(raw_item)

    def build_source_url(self, raw_item: dict[str, Any]) -> Optional[str]:
        return extraction.build_source_url(raw_item)

    def extract_author(self, raw_item: dict[str, Any]) -> dict[str, Optional[str]]:
        return extraction.extract_author(raw_item)

    def text_to_html(self, text: str) -> str:
        return extraction.text_to_html(text, self.sanitizer)
