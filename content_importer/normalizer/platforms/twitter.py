"""Twitter normalizer.

Handles tweets from the account archive (``tweets.js`` entries, optionally
wrapped as ``{"tweet": {...}}``) and v1.1-style API payloads.
"""

import html
from typing import Any, Optional

from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.item import NormalizedItem
from content_importer.normalizer.media import MediaReference, MediaType, media_id_for_url
from content_importer.utils.serialization import build_model

TWITTER_BASE_URL = "https://twitter.com"
HASHTAG_BASE_URL = f"{TWITTER_BASE_URL}/hashtag"


def unwrap_tweet(raw: dict[str, Any]) -> dict[str, Any]:
    """Archive entries nest the tweet under a ``tweet`` key."""
    inner = raw.get("tweet")
    return inner if isinstance(inner, dict) else raw


def tweet_id(tweet: dict[str, Any]) -> str:
    value = tweet.get("id_str") or tweet.get("id")
    return str(value) if value is not None else ""


def tweet_text(tweet: dict[str, Any]) -> str:
    return tweet.get("full_text") or tweet.get("text") or ""


class TwitterNormalizer(ContentNormalizer):
    """Normalizes tweets.

    Args:
        username: Archive owner's screen name, used for status URLs and to
            recognise self-replies as threads when the payload has no user.
        sanitizer: HTML sanitizer.
        date_converter: Date parser.
    """

    adapter_id = "twitter_archive"

    def __init__(
        self,
        username: Optional[str] = None,
        sanitizer: Optional[HtmlSanitizer] = None,
        date_converter: Optional[DateConverter] = None,
    ):
        super().__init__(sanitizer, date_converter)
        self.username = username

    def get_adapter_id(self) -> str:
        return self.adapter_id

    def normalize(self, raw_item: dict[str, Any]) -> NormalizedItem:
        tweet = unwrap_tweet(raw_item)
        source_id = tweet_id(tweet)
        entities = tweet.get("entities") or {}
        text = self._expand_urls(tweet_text(tweet), tweet)

        author = self.extract_author(tweet)
        user = tweet.get("user") if isinstance(tweet.get("user"), dict) else {}
        screen_name = user.get("screen_name") or self.username
        author_url = author["url"] or (f"{TWITTER_BASE_URL}/{screen_name}" if screen_name else None)

        content_type = self.determine_content_type(tweet)
        parent_id = tweet.get("in_reply_to_status_id_str") or tweet.get("in_reply_to_status_id")

        hashtags = [tag.get("text") for tag in entities.get("hashtags") or [] if tag.get("text")]
        mentions = [
            mention.get("screen_name")
            for mention in entities.get("user_mentions") or []
            if mention.get("screen_name")
        ]

        return build_model(
            NormalizedItem,
            {
                "source_id": source_id,
                "source_adapter": self.adapter_id,
                "content_type": content_type,
                "content": self.clean_content(self._render(text)),
                "publish_date": self.convert_date(tweet.get("created_at") or ""),
                "source_url": self._status_url(source_id, screen_name),
                "media": self._extract_media(tweet),
                "engagement": self.extract_engagement(tweet),
                "author_name": author["name"] or screen_name,
                "author_url": author_url,
                "parent_id": str(parent_id) if parent_id else None,
                "tags": hashtags or self.extract_hashtags(text),
                "metadata": {
                    "lang": tweet.get("lang"),
                    "client": self.sanitizer.extract_text(tweet.get("source") or "") or None,
                    "mentions": mentions or self.extract_mentions(text),
                    "is_retweet": content_type == ContentType.REPOST,
                },
            },
        )

    def determine_content_type(self, raw_item: dict[str, Any]) -> ContentType:
        tweet = unwrap_tweet(raw_item)
        if tweet.get("retweeted_status") is not None or tweet_text(tweet).startswith("RT @"):
            return ContentType.REPOST

        reply_to = tweet.get("in_reply_to_status_id_str") or tweet.get("in_reply_to_status_id")
        if reply_to:
            if self._is_self_reply(tweet):
                return ContentType.THREAD
            return ContentType.REPLY

        return super().determine_content_type(tweet)

    def _is_self_reply(self, tweet: dict[str, Any]) -> bool:
        user = tweet.get("user") if isinstance(tweet.get("user"), dict) else {}
        own_id = user.get("id_str") or user.get("id")
        reply_user = tweet.get("in_reply_to_user_id_str") or tweet.get("in_reply_to_user_id")
        if own_id and reply_user:
            return str(own_id) == str(reply_user)
        own_name = user.get("screen_name") or self.username
        reply_name = tweet.get("in_reply_to_screen_name")
        return bool(own_name and reply_name and own_name.lower() == reply_name.lower())

    def _expand_urls(self, text: str, tweet: dict[str, Any]) -> str:
        """Replace t.co links with their targets and drop links to attached media."""
        entities = tweet.get("entities") or {}
        for link in entities.get("urls") or []:
            short, expanded = link.get("url"), link.get("expanded_url")
            if short and expanded:
                text = text.replace(short, self.sanitizer.remove_tracking_params(expanded))
        for media in self._media_entities(tweet):
            if media.get("url"):
                text = text.replace(media["url"], "")
        return text.strip()

    def _render(self, text: str) -> str:
        body = html.escape(text, quote=False)
        body = self.sanitizer.linkify_entities(body, TWITTER_BASE_URL, HASHTAG_BASE_URL)
        return self.text_to_html(body)

    @staticmethod
    def _status_url(source_id: str, screen_name: Optional[str]) -> Optional[str]:
        if not source_id:
            return None
        if screen_name:
            return f"{TWITTER_BASE_URL}/{screen_name}/status/{source_id}"
        return f"{TWITTER_BASE_URL}/i/web/status/{source_id}"

    @staticmethod
    def _media_entities(tweet: dict[str, Any]) -> list[dict[str, Any]]:
        extended = (tweet.get("extended_entities") or {}).get("media")
        if extended:
            return extended
        return (tweet.get("entities") or {}).get("media") or []

    def _extract_media(self, tweet: dict[str, Any]) -> list[MediaReference]:
        references = []
        for media in self._media_entities(tweet):
            media_type = media.get("type", "photo")
            if media_type in ("video", "animated_gif"):
                url = self._best_video_variant(media)
                kind = MediaType.VIDEO
            else:
                url = media.get("media_url_https") or media.get("media_url")
                kind = MediaType.IMAGE
            if not url:
                continue

            width, height = self._dimensions(media)
            references.append(
                MediaReference(
                    id=media_id_for_url(url),
                    source_url=url,
                    type=kind,
                    alt_text=media.get("ext_alt_text") or None,
                    width=width,
                    height=height,
                    metadata={"media_key": media.get("id_str"), "twitter_type": media_type},
                )
            )
        return references

    @staticmethod
    def _best_video_variant(media: dict[str, Any]) -> Optional[str]:
        variants = (media.get("video_info") or {}).get("variants") or []
        mp4 = [v for v in variants if v.get("content_type") == "video/mp4" and v.get("url")]
        if not mp4:
            return media.get("media_url_https") or media.get("media_url")
        best = max(mp4, key=lambda variant: int(variant.get("bitrate") or 0))
        return best["url"]

    @staticmethod
    def _dimensions(media: dict[str, Any]) -> tuple[Optional[int], Optional[int]]:
        original = media.get("original_info") or {}
        large = (media.get("sizes") or {}).get("large") or {}
        width = original.get("width") or large.get("w")
        height = original.get("height") or large.get("h")
        try:
            if width is not None and height is not None:
                return int(width), int(height)
        except (TypeError, ValueError):
            pass
        return None, None
