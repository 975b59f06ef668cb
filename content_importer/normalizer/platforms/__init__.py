"""Platform normalizers."""

from content_importer.normalizer.platforms.instagram import InstagramNormalizer
from content_importer.normalizer.platforms.mastodon import MastodonNormalizer
from content_importer.normalizer.platforms.medium import MediumNormalizer
from content_importer.normalizer.platforms.twitter import TwitterNormalizer

__all__ = [
    "InstagramNormalizer",
    "MastodonNormalizer",
    "MediumNormalizer",
    "TwitterNormalizer",
]
