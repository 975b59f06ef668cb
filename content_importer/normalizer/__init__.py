"""Normalization of platform payloads.

Provides the unified item model, media references, HTML sanitizing, date
conversion and the pipeline dispatching payloads to platform normalizers.
"""

from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.normalizer.media import MediaReference, MediaType
from content_importer.normalizer.pipeline import NormalizationPipeline

__all__ = [
    "ContentNormalizer",
    "DateConverter",
    "HtmlSanitizer",
    "NormalizedItem",
    "MediaReference",
    "MediaType",
    "NormalizationPipeline",
]
