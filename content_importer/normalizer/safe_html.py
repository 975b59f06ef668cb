"""Allowlist filtering of post-body HTML.

The sanitizer delegates tag/attribute filtering to a SafeHtmlFilter so a
host system can plug in its own. AllowlistHtmlFilter is the default and
parses with BeautifulSoup.
"""

from typing import Protocol

from bs4 import BeautifulSoup, Comment, Tag

from content_importer.utils.urls import safe_urlsplit


class SafeHtmlFilter(Protocol):
    """Restricts HTML to a safe set of tags and attributes."""

    def filter(self, html: str) -> str: ...


_GLOBAL_ATTRIBUTES = frozenset({"class", "id", "title", "lang", "dir"})

DEFAULT_ALLOWED_TAGS: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "rel", "target", "name"}),
    "abbr": frozenset(),
    "b": frozenset(),
    "blockquote": frozenset({"cite"}),
    "br": frozenset(),
    "caption": frozenset(),
    "cite": frozenset(),
    "code": frozenset(),
    "del": frozenset({"datetime"}),
    "div": frozenset(),
    "em": frozenset(),
    "figcaption": frozenset(),
    "figure": frozenset(),
    "h1": frozenset(),
    "h2": frozenset(),
    "h3": frozenset(),
    "h4": frozenset(),
    "h5": frozenset(),
    "h6": frozenset(),
    "hr": frozenset(),
    "i": frozenset(),
    "img": frozenset({"src", "alt", "width", "height", "srcset", "sizes", "loading"}),
    "ins": frozenset({"datetime"}),
    "li": frozenset(),
    "ol": frozenset({"start", "reversed"}),
    "p": frozenset(),
    "pre": frozenset(),
    "q": frozenset({"cite"}),
    "s": frozenset(),
    "span": frozenset(),
    "strong": frozenset(),
    "sub": frozenset(),
    "sup": frozenset(),
    "table": frozenset(),
    "tbody": frozenset(),
    "td": frozenset({"colspan", "rowspan"}),
    "th": frozenset({"colspan", "rowspan", "scope"}),
    "thead": frozenset(),
    "tr": frozenset(),
    "u": frozenset(),
    "ul": frozenset(),
    "video": frozenset({"src", "poster", "controls", "width", "height"}),
    "audio": frozenset({"src", "controls"}),
    "source": frozenset({"src", "type"}),
}

DEFAULT_ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "ftp", "ftps", "tel"})

_URL_ATTRIBUTES = frozenset({"href", "src", "cite", "poster"})


class AllowlistHtmlFilter:
    """Keep allowlisted tags and attributes, unwrapping everything else.

    Disallowed tags are removed but their text is kept. URL attributes
    whose scheme is not allowlisted (``javascript:``, ``data:``) are dropped.

    Args:
        allowed_tags: Tag name to permitted attribute names.
        allowed_protocols: URL schemes permitted in link and source attributes.
    """

    def __init__(
        self,
        allowed_tags: dict[str, frozenset[str]] | None = None,
        allowed_protocols: frozenset[str] | None = None,
    ):
        self.allowed_tags = allowed_tags if allowed_tags is not None else DEFAULT_ALLOWED_TAGS
        self.allowed_protocols = (
            allowed_protocols if allowed_protocols is not None else DEFAULT_ALLOWED_PROTOCOLS
        )

    def filter(self, html: str) -> str:
        if not html:
            return ""

        soup = BeautifulSoup(html, "html.parser")

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag in soup.find_all(True):
            if not isinstance(tag, Tag):
                continue
            allowed = self.allowed_tags.get(tag.name)
            if allowed is None:
                tag.unwrap()
                continue
            for attribute in list(tag.attrs):
                name = attribute.lower()
                if name not in allowed and name not in _GLOBAL_ATTRIBUTES:
                    del tag.attrs[attribute]
                elif name in _URL_ATTRIBUTES and not self._is_allowed_url(tag.attrs[attribute]):
                    del tag.attrs[attribute]

        return str(soup)

    def _is_allowed_url(self, value: object) -> bool:
        if not isinstance(value, str):
            return False
        parts = safe_urlsplit(value.strip())
        if parts is None:
            return False
        # Relative references carry no scheme
        return not parts.scheme or parts.scheme.lower() in self.allowed_protocols
