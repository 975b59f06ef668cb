"""
Pytest Configuration and Shared Fixtures.

This module provides common fixtures for all tests:

- store / cache: In-memory storage collaborators (cache on a fake clock)
- fixed_now: Frozen clock for relative date parsing
- sample_tweet: Twitter archive entry
- sample_status: Mastodon API status
- sample_instagram_post: Instagram export entry
- sample_article: Medium article payload
- make_adapter: Factory for a minimal BaseAdapter subclass
- tweets_js: Twitter archive file on disk
"""

import json
from datetime import datetime, timezone

import pytest

from content_importer.adapters.base import AuthType, BaseAdapter
from content_importer.core.storage import InMemoryCache, InMemoryKeyValueStore
from content_importer.manifest.content_manifest import ContentManifest
from content_importer.manifest.content_type import ContentType
from content_importer.manifest.manifest_item import ManifestItem
from content_importer.schema.settings_schema import SettingsSchema


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Return a hand-driven clock."""
    return FakeClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Return an empty credential store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(clock) -> InMemoryCache:
    """Return an empty transient cache driven by the fake clock."""
    return InMemoryCache(clock=clock)


@pytest.fixture
def fixed_now() -> datetime:
    """Return the frozen 'now' used for relative dates."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_tweet() -> dict:
    """Return a tweets.js archive entry with a hashtag, a mention and a photo."""
    return {
        "tweet": {
            "id_str": "1747000000000000001",
            "created_at": "Mon Jan 15 10:30:00 +0000 2024",
            "full_text": "Shipping the new importer with @alice today #python https://t.co/pic1",
            "lang": "en",
            "favorite_count": "12",
            "retweet_count": "3",
            "source": '<a href="https://mobile.twitter.com" rel="nofollow">Twitter Web App</a>',
            "entities": {
                "hashtags": [{"text": "python"}],
                "user_mentions": [{"screen_name": "alice"}],
                "urls": [],
            },
            "extended_entities": {
                "media": [
                    {
                        "id_str": "99",
                        "type": "photo",
                        "url": "https://t.co/pic1",
                        "media_url_https": "https://pbs.twimg.com/media/abc.jpg",
                        "sizes": {"large": {"w": 1200, "h": 800}},
                    }
                ]
            },
        }
    }


@pytest.fixture
def sample_status() -> dict:
    """Return a Mastodon status with an image attachment."""
    return {
        "id": "111",
        "created_at": "2024-01-15T10:30:00.000Z",
        "in_reply_to_id": None,
        "in_reply_to_account_id": None,
        "visibility": "public",
        "language": "en",
        "sensitive": False,
        "spoiler_text": "",
        "url": "https://mastodon.social/@bob/111",
        "uri": "https://mastodon.social/users/bob/statuses/111",
        "content": "<p>Hello <a href=\"https://mastodon.social/tags/fediverse\">#fediverse</a></p>",
        "reblogs_count": 2,
        "favourites_count": 5,
        "replies_count": 1,
        "reblog": None,
        "account": {
            "id": "42",
            "username": "bob",
            "acct": "bob",
            "display_name": "Bob",
            "url": "https://mastodon.social/@bob",
        },
        "media_attachments": [
            {
                "id": "900",
                "type": "image",
                "url": "https://files.mastodon.social/media/photo.png",
                "preview_url": "https://files.mastodon.social/media/small/photo.png",
                "description": "A cat",
                "meta": {"original": {"width": 640, "height": 480}},
            }
        ],
        "mentions": [],
        "tags": [{"name": "fediverse"}],
    }


@pytest.fixture
def sample_instagram_post() -> dict:
    """Return a posts_1.json entry with two photos (a carousel)."""
    return {
        "media": [
            {
                "uri": "media/posts/202401/one.jpg",
                "creation_timestamp": 1705315800,
                "title": "Sunday market with @carol #food",
            },
            {
                "uri": "media/posts/202401/two.jpg",
                "creation_timestamp": 1705315800,
                "title": "",
            },
        ]
    }


@pytest.fixture
def sample_article() -> dict:
    """Return a Medium article payload."""
    return {
        "id": "abc123",
        "title": "Writing <em>importers</em>",
        "content": (
            "<h2>Intro</h2><p onclick=\"steal()\">Body text</p>"
            "<script>alert(1)</script>"
            "<img src=\"https://cdn-images-1.medium.com/max/800/cover.png\" alt=\"cover\">"
        ),
        "published_at": "2024-01-15T10:30:00.000Z",
        "url": "https://medium.com/@dana/writing-importers-abc123",
        "claps": 40,
        "creator": "Dana",
        "tags": ["python", "etl"],
    }


# =============================================================================
# Adapters
# =============================================================================


class DummyAdapter(BaseAdapter):
    """Minimal adapter with an API key field and a one-item manifest."""

    def __init__(self, store, cache, adapter_id="dummy", auth_type=AuthType.API_KEY, **kwargs):
        super().__init__(store, cache, **kwargs)
        self.adapter_id = adapter_id
        self.auth_type = auth_type
        self.manifest_builds = 0

    def get_id(self) -> str:
        return self.adapter_id

    def get_name(self) -> str:
        return "Dummy"

    def get_description(self) -> str:
        return "Adapter used in tests"

    def get_icon(self) -> str:
        return "dummy"

    def get_auth_type(self) -> AuthType:
        return self.auth_type

    def get_supported_content_types(self) -> list[ContentType]:
        return [ContentType.POST]

    def build_settings_schema(self) -> SettingsSchema:
        return (
            SettingsSchema()
            .add_field("api_key", {"type": "password", "label": "API key", "required": True})
            .add_field("limit", {"type": "number", "label": "Limit", "min": 1, "max": 10, "default": 5})
        )

    def verify_credentials(self, values):
        if values["api_key"] == "rejected":
            return None
        return values

    def build_manifest(self, **options) -> ContentManifest:
        cached = self.get_cache("manifest")
        if cached is not None and not options.get("refresh"):
            return ContentManifest.from_array(cached)

        self.manifest_builds += 1
        manifest = ContentManifest(self.get_id())
        manifest.add_item(
            ManifestItem(
                id="1",
                type=ContentType.POST,
                title="First",
                created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
            )
        )
        self.set_cache("manifest", manifest.to_array())
        return manifest

    def load_item(self, item_id: str) -> dict:
        return {"id": item_id}


@pytest.fixture
def make_adapter(store, cache):
    """Return a factory for dummy adapters sharing the test store and cache."""

    def factory(adapter_id: str = "dummy", auth_type: AuthType = AuthType.API_KEY, **kwargs) -> DummyAdapter:
        return DummyAdapter(store, cache, adapter_id=adapter_id, auth_type=auth_type, **kwargs)

    return factory


@pytest.fixture
def tweets_js(tmp_path, sample_tweet):
    """Write a tweets.js archive holding the sample tweet and a self-reply to it."""
    reply = {
        "tweet": {
            "id_str": "1747000000000000002",
            "created_at": "Mon Jan 15 11:00:00 +0000 2024",
            "full_text": "And it handles threads",
            "in_reply_to_status_id_str": "1747000000000000001",
            "in_reply_to_screen_name": "me",
        }
    }
    path = tmp_path / "tweets.js"
    path.write_text(
        "window.YTD.tweets.part0 = " + json.dumps([sample_tweet, reply], indent=2) + ";\n",
        encoding="utf-8",
    )
    return path
