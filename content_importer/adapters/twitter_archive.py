"""Twitter (X) account archive adapter."""

import json
import re
from typing import Any

from content_importer.adapters.file_export import FileExportAdapter
from content_importer.adapters.registry import register_adapter_class
from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.platforms.twitter import TwitterNormalizer, tweet_id, unwrap_tweet

# tweets.js starts with e.g. "window.YTD.tweets.part0 = ["
_ARCHIVE_PREFIX_RE = re.compile(r"^\s*window\.YTD\.[\w.]+\s*=\s*")


@register_adapter_class("twitter_archive")
class TwitterArchiveAdapter(FileExportAdapter):
    """Imports tweets from ``data/tweets.js`` of a Twitter archive."""

    file_accept = ".js,.json"

    def get_id(self) -> str:
        return "twitter_archive"

    def get_name(self) -> str:
        return "Twitter / X Archive"

    def get_description(self) -> str:
        return "Import tweets, threads and replies from a downloaded Twitter archive."

    def get_icon(self) -> str:
        return "twitter"

    def get_supported_content_types(self) -> list[ContentType]:
        return [ContentType.POST, ContentType.THREAD, ContentType.REPLY, ContentType.REPOST]

    def default_normalizer(self) -> ContentNormalizer:
        return TwitterNormalizer()

    def parse_export(self, text: str) -> list[dict[str, Any]]:
        """Accept ``tweets.js`` (JavaScript assignment) or plain JSON."""
        data = json.loads(_ARCHIVE_PREFIX_RE.sub("", text, count=1).rstrip().rstrip(";"))
        if isinstance(data, dict):
            data = data.get("tweets") or data.get("data") or [data]
        return self.entry_list(data)

    def entry_id(self, entry: dict[str, Any]) -> str:
        return tweet_id(unwrap_tweet(entry))
