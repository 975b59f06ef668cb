"""
HTML cleanup for imported content.

HtmlSanitizer removes executable markup, repairs typographic characters,
filters the remaining HTML through a SafeHtmlFilter, and offers helpers for
plain text, links and URL extraction.

Usage:
    sanitizer = HtmlSanitizer()
    body = sanitizer.sanitize(raw_html)
    text = sanitizer.extract_text(body)
"""

import html as html_lib
import re
from urllib.parse import parse_qsl, quote, urlencode, urlunsplit

from content_importer.normalizer.safe_html import AllowlistHtmlFilter, SafeHtmlFilter
from content_importer.utils.urls import is_valid_url, safe_urlsplit

TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "fbclid",
        "gclid",
        "ref",
        "ref_src",
        "ref_url",
        # Twitter share parameters
        "s",
        "t",
    }
)

_ENCODING_REPLACEMENTS = (
    ("\u00a0", " "),
    ("\u2019", "'"),
    ("\u2018", "'"),
    ("\u201c", "\""),
    ("\u201d", "\""),
    ("\u2013", "-"),
    ("\u2014", "--"),
    ("\u2026", "..."),
)

_DANGEROUS_BLOCK_RE = re.compile(
    r"<(script|style|noscript|iframe|object)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_EMBED_RE = re.compile(r"<embed\b[^>]*/?>", re.IGNORECASE | re.DOTALL)
_OPENING_TAG_RE = re.compile(r"<[a-zA-Z][^>]*>")
_EVENT_HANDLER_RE = re.compile(
    r"""\s+on\w+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""",
    re.IGNORECASE,
)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_ANY_TAG_RE = re.compile(r"<[^>]*>")
_SPACES_RE = re.compile(r"[ \t]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_URL_RE = re.compile(r"""(https?://[^\s<>"']+)""", re.IGNORECASE)
_HASHTAG_RE = re.compile(r"#(\w+)")
_MENTION_RE = re.compile(r"@(\w+)")
_ENTITY_RE = re.compile(
    r"""(?P<url>https?://[^\s<>"']+)|@(?P<mention>\w+)|#(?P<hashtag>\w+)""",
    re.IGNORECASE,
)
_HREF_RE = re.compile(r"""href=["']([^"']+)["']""", re.IGNORECASE)
_SRC_RE = re.compile(r"""src=["']([^"']+)["']""", re.IGNORECASE)


def strip_all_tags(html: str) -> str:
    """Remove every tag (and script/style bodies), then trim."""
    if not html:
        return ""
    text = _SCRIPT_STYLE_RE.sub("", html)
    text = _ANY_TAG_RE.sub("", text)
    return text.strip()


class HtmlSanitizer:
    """Sanitization and text helpers for HTML bodies.

    Args:
        safe_filter: Allowlist filter applied by ``sanitize``. Defaults to
            AllowlistHtmlFilter.
    """

    def __init__(self, safe_filter: SafeHtmlFilter | None = None):
        self.safe_filter = safe_filter or AllowlistHtmlFilter()

    def sanitize(self, html: str) -> str:
        """Produce safe HTML: strip scripts, fix encoding, filter, tidy whitespace."""
        if not html:
            return ""

        html = self.strip_scripts(html)
        html = self.fix_encoding(html)
        html = self.safe_filter.filter(html)
        return self.normalize_whitespace(html)

    def strip_scripts(self, html: str) -> str:
        """Remove executable elements with their content and inline event handlers."""
        html = _DANGEROUS_BLOCK_RE.sub("", html)
        html = _EMBED_RE.sub("", html)
        return _OPENING_TAG_RE.sub(
            lambda match: _EVENT_HANDLER_RE.sub("", match.group(0)),
            html,
        )

    def fix_encoding(self, text: str | bytes) -> str:
        """Replace typographic characters with ASCII and drop control characters.

        Newlines and tabs are kept. Bytes that are not valid UTF-8 are decoded
        as Windows-1252.
        """
        if not text:
            return ""

        if isinstance(text, bytes):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError:
                text = text.decode("cp1252", errors="replace")

        for search, replacement in _ENCODING_REPLACEMENTS:
            text = text.replace(search, replacement)

        return _CONTROL_CHARS_RE.sub("", text)

    def remove_tracking_params(self, url: str) -> str:
        """Drop tracking query parameters from a URL.

        URLs without a host or without a query string come back unchanged.
        """
        if not url:
            return ""

        parts = safe_urlsplit(url)
        if parts is None or not parts.netloc or not parts.query:
            return url

        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key not in TRACKING_PARAMS
        ]
        return urlunsplit(
            (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
        )

    def extract_text(self, html: str) -> str:
        """Plain text of an HTML fragment."""
        if not html:
            return ""

        html = self.strip_scripts(html)
        text = strip_all_tags(html)
        return self.normalize_whitespace(text).strip()

    def normalize_whitespace(self, text: str) -> str:
        """Collapse spaces and tabs, cap blank lines at one, trim every line."""
        text = _SPACES_RE.sub(" ", text)
        text = _BLANK_LINES_RE.sub("\n\n", text)
        return "\n".join(line.strip() for line in text.split("\n"))

    def convert_line_breaks(self, text: str) -> str:
        """Wrap blank-line separated blocks of text in paragraphs."""
        if not text:
            return ""

        paragraphs = [part.strip() for part in _PARAGRAPH_SPLIT_RE.split(text)]
        paragraphs = [part for part in paragraphs if part]
        if not paragraphs:
            return ""

        paragraphs = [part.replace("\n", "<br />\n") for part in paragraphs]
        return "<p>" + "</p>\n<p>".join(paragraphs) + "</p>"

    def linkify_urls(self, text: str) -> str:
        if not text:
            return ""
        return _URL_RE.sub(r'<a href="\1">\1</a>', text)

    def linkify_hashtags(self, text: str, base_url: str) -> str:
        """Turn ``#tag`` into a link to ``base_url/tag``."""
        if not text:
            return ""
        return _HASHTAG_RE.sub(lambda match: self._entity_link("#", match.group(1), base_url), text)

    def linkify_mentions(self, text: str, base_url: str) -> str:
        """Turn ``@user`` into a link to ``base_url/user``."""
        if not text:
            return ""
        return _MENTION_RE.sub(lambda match: self._entity_link("@", match.group(1), base_url), text)

    def linkify_entities(
        self,
        text: str,
        mention_base_url: str,
        hashtag_base_url: str,
        urls: bool = True,
    ) -> str:
        """Link URLs, mentions and hashtags in one pass over escaped text.

        A ``#`` or ``@`` inside a URL stays part of that URL. With
        ``urls=False`` URLs are left as text but still shield their contents.
        """
        if not text:
            return ""

        def replace(match: re.Match) -> str:
            if match.group("url"):
                url = match.group("url")
                return f'<a href="{url}">{url}</a>' if urls else url
            if match.group("mention"):
                return self._entity_link("@", match.group("mention"), mention_base_url)
            return self._entity_link("#", match.group("hashtag"), hashtag_base_url)

        return _ENTITY_RE.sub(replace, text)

    @staticmethod
    def _entity_link(prefix: str, name: str, base_url: str) -> str:
        target = base_url.rstrip("/") + "/" + quote(name, safe="")
        return (
            f'<a href="{html_lib.escape(target, quote=True)}">'
            f"{prefix}{html_lib.escape(name, quote=False)}</a>"
        )

    def extract_urls(self, html: str) -> list[str]:
        """Well-formed URLs found in href and src attributes, de-duplicated."""
        if not html:
            return []

        candidates = _HREF_RE.findall(html) + _SRC_RE.findall(html)
        urls: list[str] = []
        seen: set[str] = set()
        for url in candidates:
            if url in seen:
                continue
            seen.add(url)
            if is_valid_url(url):
                urls.append(url)
        return urls
