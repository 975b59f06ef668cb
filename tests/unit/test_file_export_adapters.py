"""Unit tests for the export-file adapters."""

import json

import pytest

from content_importer.adapters.base import AuthType
from content_importer.adapters.instagram_export import InstagramExportAdapter
from content_importer.adapters.twitter_archive import TwitterArchiveAdapter
from content_importer.core.exceptions import AdapterNotFoundError, ExportFileError, ValidationError
from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.platforms.twitter import TwitterNormalizer


@pytest.fixture
def twitter_adapter(store, cache) -> TwitterArchiveAdapter:
    return TwitterArchiveAdapter(store, cache, normalizer=TwitterNormalizer(username="me"))


@pytest.fixture
def instagram_adapter(store, cache) -> InstagramExportAdapter:
    return InstagramExportAdapter(store, cache)


class TestTwitterArchiveAdapter:
    """Test the Twitter archive adapter."""

    def test_metadata(self, twitter_adapter):
        """Descriptive metadata and schema."""
        assert twitter_adapter.get_id() == "twitter_archive"
        assert twitter_adapter.get_auth_type() == AuthType.FILE_UPLOAD
        assert ContentType.THREAD in twitter_adapter.get_supported_content_types()

        file_field = twitter_adapter.get_settings_schema().get_field("file")
        assert file_field.required is True
        assert file_field.accept == ".js,.json"

    def test_authenticate_with_archive(self, twitter_adapter, tweets_js, store):
        """A readable archive authenticates and is remembered."""
        assert twitter_adapter.authenticate({"file": str(tweets_js)}) is True
        assert store.get("content_importer_adapter_twitter_archive") == {"file": str(tweets_js)}

    def test_authenticate_missing_file(self, twitter_adapter, tmp_path):
        """A path that does not exist fails authentication."""
        assert twitter_adapter.authenticate({"file": str(tmp_path / "nope.js")}) is False
        assert twitter_adapter.is_authenticated() is False

    def test_authenticate_without_file(self, twitter_adapter):
        """The file field is required."""
        with pytest.raises(ValidationError):
            twitter_adapter.authenticate({})

    def test_authenticate_invalid_json(self, twitter_adapter, tmp_path):
        """A corrupt archive raises ExportFileError."""
        path = tmp_path / "tweets.js"
        path.write_text("window.YTD.tweets.part0 = [{", encoding="utf-8")

        with pytest.raises(ExportFileError) as exc_info:
            twitter_adapter.authenticate({"file": str(path)})

        assert exc_info.value.details["path"] == str(path)

    @pytest.mark.parametrize("payload", ["5", '"tweets"', '{"tweets": 5}'])
    def test_authenticate_non_list_export(self, twitter_adapter, tmp_path, payload):
        """Exports that do not hold a list of entries raise ExportFileError."""
        path = tmp_path / "tweets.json"
        path.write_text(payload, encoding="utf-8")

        with pytest.raises(ExportFileError) as exc_info:
            twitter_adapter.authenticate({"file": str(path)})

        assert exc_info.value.details["path"] == str(path)
        assert exc_info.value.details["adapter_id"] == "twitter_archive"

    def test_parse_export_variants(self, twitter_adapter):
        """Prefixed scripts, plain lists and wrapped objects are accepted."""
        assert twitter_adapter.parse_export('window.YTD.tweet.part0 = [{"tweet": {"id_str": "1"}}]') == [
            {"tweet": {"id_str": "1"}}
        ]
        assert twitter_adapter.parse_export('[{"id": 1}, "junk"]') == [{"id": 1}]
        assert twitter_adapter.parse_export('{"tweets": [{"id": 2}]}') == [{"id": 2}]

    def test_manifest(self, twitter_adapter, tweets_js):
        """Every tweet becomes a manifest entry with its relations."""
        twitter_adapter.authenticate({"file": str(tweets_js)})

        manifest = twitter_adapter.fetch_manifest()

        assert manifest.source_id == "twitter_archive"
        assert len(manifest) == 2
        assert manifest.get_stats() == {"total": 2, "with_media": 1, "by_type": {"post": 1, "thread": 1}}
        thread = manifest.get_item("1747000000000000002")
        assert thread.parent_id == "1747000000000000001"
        assert thread.title == "And it handles threads"

    def test_manifest_limit(self, twitter_adapter, tweets_js):
        """The limit option caps the number of entries."""
        twitter_adapter.authenticate({"file": str(tweets_js)})

        assert len(twitter_adapter.fetch_manifest(limit=1)) == 1

    def test_manifest_skips_broken_entries(self, twitter_adapter, tmp_path, sample_tweet):
        """Entries that cannot be normalized are left out."""
        path = tmp_path / "tweets.json"
        path.write_text(json.dumps([sample_tweet, {"tweet": {"id_str": "9"}}]), encoding="utf-8")
        twitter_adapter.authenticate({"file": str(path)})

        manifest = twitter_adapter.fetch_manifest()

        assert [item.id for item in manifest] == ["1747000000000000001"]

    def test_fetch_item(self, twitter_adapter, tweets_js, sample_tweet):
        """Items are looked up by tweet id."""
        twitter_adapter.authenticate({"file": str(tweets_js)})

        assert twitter_adapter.fetch_item("1747000000000000001") == sample_tweet

    def test_fetch_item_not_found(self, twitter_adapter, tweets_js):
        """Unknown ids raise AdapterNotFoundError."""
        twitter_adapter.authenticate({"file": str(tweets_js)})

        with pytest.raises(AdapterNotFoundError) as exc_info:
            twitter_adapter.fetch_item("404")

        assert "Item not found: 404" in str(exc_info.value)

    def test_entries_reread_after_cache_expiry(self, twitter_adapter, tweets_js, clock):
        """Entries are re-read from disk once the cache expires."""
        twitter_adapter.authenticate({"file": str(tweets_js)})
        clock.advance(twitter_adapter.cache_ttl)

        assert len(twitter_adapter.get_entries()) == 2

    def test_disconnect_clears_entries(self, twitter_adapter, tweets_js):
        """Disconnecting drops the cached entries."""
        twitter_adapter.authenticate({"file": str(tweets_js)})

        twitter_adapter.disconnect()

        assert twitter_adapter.get_cache("entries") is None
        assert twitter_adapter.is_authenticated() is False


class TestInstagramExportAdapter:
    """Test the Instagram export adapter."""

    def test_parse_wrapped_export(self, instagram_adapter, sample_instagram_post):
        """Known wrapper keys are unwrapped."""
        text = json.dumps({"ig_reels_media": [sample_instagram_post]})

        assert instagram_adapter.parse_export(text) == [sample_instagram_post]

    def test_parse_single_object(self, instagram_adapter):
        """An unwrapped single object is one entry."""
        assert instagram_adapter.parse_export('{"id": "1"}') == [{"id": "1"}]

    def test_parse_scalar_export(self, instagram_adapter):
        """A bare number is not an export."""
        with pytest.raises(ExportFileError):
            instagram_adapter.parse_export("5")

    def test_manifest(self, instagram_adapter, tmp_path, sample_instagram_post):
        """Export posts appear in the manifest keyed by their media path."""
        path = tmp_path / "posts_1.json"
        path.write_text(json.dumps([sample_instagram_post]), encoding="utf-8")
        instagram_adapter.authenticate({"file": str(path)})

        manifest = instagram_adapter.fetch_manifest()

        item = manifest.get_item("media/posts/202401/one.jpg")
        assert item.type == ContentType.MEDIA
        assert len(item.media_urls) == 2
        assert instagram_adapter.fetch_item("media/posts/202401/one.jpg") == sample_instagram_post

    def test_utf8_bom(self, instagram_adapter, tmp_path):
        """Exports saved with a BOM are read."""
        path = tmp_path / "posts_1.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'[{"id": "1"}]')

        assert instagram_adapter.read_export(path) == [{"id": "1"}]
