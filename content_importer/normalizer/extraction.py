"""
Extraction helpers shared by all normalizers.

Each helper is a plain function over a raw payload (or a string) so it can
be reused and tested on its own. They are lenient: a missing or malformed
optional signal yields an empty result, never an error.
"""

import re
from datetime import datetime
from typing import Any, Iterable, Optional

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.media import (
    AUDIO_EXTENSIONS,
    IMAGE_EXTENSIONS,
    VIDEO_EXTENSIONS,
    MediaReference,
)
from content_importer.utils.urls import url_extension

MEDIA_EXTENSIONS = IMAGE_EXTENSIONS | VIDEO_EXTENSIONS | AUDIO_EXTENSIONS

MEDIA_HOSTS = (
    "pbs.twimg.com",
    "video.twimg.com",
    "instagram.com/p/",
    "cdninstagram.com",
    "imgur.com",
    "i.imgur.com",
    "giphy.com",
    "media.tumblr.com",
)

ENGAGEMENT_FIELDS: dict[str, tuple[str, ...]] = {
    "likes": ("likes", "like_count", "favorite_count", "favourites_count"),
    "shares": ("shares", "share_count", "retweet_count", "reblog_count"),
    "comments": ("comments", "comment_count", "reply_count"),
    "views": ("views", "view_count", "impression_count"),
    "bookmarks": ("bookmarks", "bookmark_count", "saves", "save_count"),
}

SOURCE_URL_KEYS = ("url", "source_url", "link", "permalink", "original_url")

_HASHTAG_RE = re.compile(r"#(\w+)")
_MENTION_RE = re.compile(r"@(\w+)")


def clean_content(html: str, sanitizer: HtmlSanitizer) -> str:
    return sanitizer.sanitize(html)


def convert_date(
    date_string: str,
    converter: DateConverter,
    fmt: Optional[str] = None,
) -> datetime:
    return converter.convert(date_string, fmt)


def text_to_html(text: str, sanitizer: HtmlSanitizer) -> str:
    """Turn newline-separated plain text into paragraph markup."""
    return sanitizer.convert_line_breaks(text)


# =============================================================================
# Media
# =============================================================================


def is_media_url(url: str) -> bool:
    """Whether a URL looks like a media asset.

    True for a known image/video/audio extension, or when the URL contains
    a known media host (extension or not).
    """
    if not url:
        return False
    extension = url_extension(url)
    if extension is not None and extension in MEDIA_EXTENSIONS:
        return True
    return any(host in url for host in MEDIA_HOSTS)


def extract_media_from_html(html: str, sanitizer: HtmlSanitizer) -> list[MediaReference]:
    """References for the media-like URLs linked or embedded in HTML."""
    return [
        MediaReference.from_url(url)
        for url in sanitizer.extract_urls(html)
        if is_media_url(url)
    ]


def extract_media_from_urls(urls: Iterable[Optional[str]]) -> list[MediaReference]:
    """References for URLs already known to be media. Empty entries are skipped."""
    return [MediaReference.from_url(url) for url in urls if url]


# =============================================================================
# Text entities
# =============================================================================


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def extract_hashtags(text: str) -> list[str]:
    """Hashtags without ``#``, de-duplicated in order of first appearance."""
    if not text:
        return []
    return _unique(_HASHTAG_RE.findall(text))


def extract_mentions(text: str) -> list[str]:
    """Mentioned usernames without ``@``, de-duplicated in order of first appearance."""
    if not text:
        return []
    return _unique(_MENTION_RE.findall(text))


# =============================================================================
# Payload fields
# =============================================================================


def determine_content_type(raw_item: dict[str, Any]) -> ContentType:
    """Classify a payload by common reply/repost/thread markers."""
    if raw_item.get("parent_id") is not None or raw_item.get("in_reply_to") is not None:
        return ContentType.REPLY
    if raw_item.get("retweeted_status") is not None or raw_item.get("is_repost") is not None:
        return ContentType.REPOST
    if raw_item.get("is_thread"):
        return ContentType.THREAD
    return ContentType.POST


def _as_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return max(int(number), 0)


def extract_engagement(raw_item: dict[str, Any]) -> dict[str, int]:
    """Harmonize platform counters under likes/shares/comments/views/bookmarks.

    For each metric the first numeric candidate key wins. Metrics with no
    numeric candidate are left out.
    """
    engagement: dict[str, int] = {}
    for metric, candidates in ENGAGEMENT_FIELDS.items():
        for key in candidates:
            count = _as_count(raw_item.get(key))
            if count is not None:
                engagement[metric] = count
                break
    return engagement


def build_source_url(raw_item: dict[str, Any]) -> Optional[str]:
    """First non-empty URL-like key of a payload."""
    for key in SOURCE_URL_KEYS:
        value = raw_item.get(key)
        if value:
            return str(value)
    return None


def extract_author(raw_item: dict[str, Any]) -> dict[str, Optional[str]]:
    """Author name and URL from nested ``author``/``user`` objects or flat keys.

    Returns:
        ``{"name": ..., "url": ...}``; both None when nothing matched.
    """
    author = raw_item.get("author")
    if isinstance(author, dict):
        name = author.get("name") or author.get("display_name")
        if name:
            return {"name": name, "url": author.get("url") or author.get("profile_url")}

    user = raw_item.get("user")
    if isinstance(user, dict):
        name = user.get("name") or user.get("screen_name")
        if name:
            return {"name": name, "url": user.get("url")}

    name = raw_item.get("author_name") or raw_item.get("username")
    if name:
        return {"name": name, "url": raw_item.get("author_url")}

    return {"name": None, "url": None}
