"""URL parsing helpers shared by the schema validator, sanitizer and media model."""

import posixpath
from urllib.parse import SplitResult, urlsplit


def safe_urlsplit(url: str) -> SplitResult | None:
    """Split a URL, returning None for values urllib refuses to parse."""
    if not isinstance(url, str):
        return None
    try:
        return urlsplit(url)
    except ValueError:
        return None


def is_valid_url(url: str) -> bool:
    """Check that a URL has an alphabetic scheme and a host.

    Pseudo-URLs such as ``javascript:alert(1)`` or ``mailto:`` links have no
    host and are rejected, as are relative paths.
    """
    if not isinstance(url, str) or not url or url != url.strip():
        return False
    if any(char.isspace() for char in url):
        return False
    parts = safe_urlsplit(url)
    if parts is None or not parts.scheme or not parts.netloc:
        return False
    if not parts.scheme[0].isalpha():
        return False
    try:
        hostname = parts.hostname
    except ValueError:
        return False
    return bool(hostname)


def url_path(url: str) -> str | None:
    """Return the path component of a URL, or None when absent."""
    parts = safe_urlsplit(url)
    if parts is None or not parts.path:
        return None
    return parts.path


def url_extension(url: str) -> str | None:
    """Return the lowercase file extension of a URL path, without the dot."""
    path = url_path(url)
    if path is None:
        return None
    extension = posixpath.splitext(path)[1]
    if not extension or extension == ".":
        return None
    return extension[1:].lower()


def url_filename(url: str) -> str | None:
    """Return the last path segment of a URL, or None when there is none."""
    path = url_path(url)
    if path is None:
        return None
    return posixpath.basename(path) or None
