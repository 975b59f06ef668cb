"""Content type classification shared by manifests and normalized items."""

from enum import Enum


class ContentType(str, Enum):
    """Kinds of importable content."""

    POST = "post"
    THREAD = "thread"
    REPLY = "reply"
    REPOST = "repost"
    MEDIA = "media"
    ARTICLE = "article"
    VIDEO = "video"
    STORY = "story"

    @property
    def label(self) -> str:
        """Human-readable name."""
        return _LABELS[self]

    @property
    def is_primary(self) -> bool:
        """Whether this is original content rather than a derivative."""
        return _PRIMARY[self]


_LABELS: dict[ContentType, str] = {
    ContentType.POST: "Post",
    ContentType.THREAD: "Thread",
    ContentType.REPLY: "Reply",
    ContentType.REPOST: "Repost",
    ContentType.MEDIA: "Media",
    ContentType.ARTICLE: "Article",
    ContentType.VIDEO: "Video",
    ContentType.STORY: "Story",
}

_PRIMARY: dict[ContentType, bool] = {
    ContentType.POST: True,
    ContentType.THREAD: True,
    ContentType.ARTICLE: True,
    ContentType.VIDEO: True,
    ContentType.MEDIA: True,
    ContentType.REPLY: False,
    ContentType.REPOST: False,
    ContentType.STORY: False,
}
