"""Unit tests for NormalizationPipeline."""

import pytest

from content_importer.core.exceptions import NormalizerNotFoundError, ParseError
from content_importer.normalizer.pipeline import NormalizationPipeline
from content_importer.normalizer.platforms.mastodon import MastodonNormalizer
from content_importer.normalizer.platforms.twitter import TwitterNormalizer


def make_status(sample_status: dict, status_id: str) -> dict:
    return {**sample_status, "id": status_id, "url": f"https://mastodon.social/@bob/{status_id}"}


@pytest.fixture
def pipeline() -> NormalizationPipeline:
    """Pipeline with the Mastodon and Twitter normalizers registered."""
    pipeline = NormalizationPipeline(max_workers=3)
    pipeline.register_normalizer(MastodonNormalizer())
    pipeline.register_normalizer(TwitterNormalizer())
    return pipeline


class TestRegistration:
    """Test normalizer registration and lookup."""

    def test_lookup(self, pipeline):
        """Normalizers are found by adapter id."""
        assert pipeline.has_normalizer("mastodon") is True
        assert isinstance(pipeline.get_normalizer("twitter_archive"), TwitterNormalizer)
        assert pipeline.list_adapters() == ["mastodon", "twitter_archive"]

    def test_replace(self, pipeline):
        """Registering again replaces the previous normalizer."""
        replacement = TwitterNormalizer(username="me")
        pipeline.register_normalizer(replacement)

        assert pipeline.get_normalizer("twitter_archive") is replacement
        assert len(pipeline.list_adapters()) == 2

    def test_unknown_adapter(self, pipeline):
        """Unknown ids raise NormalizerNotFoundError."""
        with pytest.raises(NormalizerNotFoundError) as exc_info:
            pipeline.get_normalizer("myspace")

        assert exc_info.value.details["adapter_id"] == "myspace"


class TestNormalize:
    """Test single and batch normalization."""

    def test_single(self, pipeline, sample_status):
        """One payload is dispatched to its normalizer."""
        item = pipeline.normalize("mastodon", sample_status)

        assert item.source_id == "111"

    def test_single_unknown_adapter(self, pipeline, sample_status):
        """Normalizing for an unregistered adapter fails."""
        with pytest.raises(NormalizerNotFoundError):
            pipeline.normalize("myspace", sample_status)

    def test_batch_keeps_order(self, pipeline, sample_status):
        """Results come back in input order regardless of worker scheduling."""
        ids = [str(n) for n in range(10)]
        raw_items = [make_status(sample_status, status_id) for status_id in ids]

        items = pipeline.normalize_batch("mastodon", raw_items)

        assert [item.source_id for item in items] == ids

    def test_batch_empty(self, pipeline):
        """An empty batch yields an empty list."""
        assert pipeline.normalize_batch("mastodon", []) == []

    def test_batch_unknown_adapter_fails_first(self, pipeline):
        """The normalizer is resolved before anything runs."""
        with pytest.raises(NormalizerNotFoundError):
            pipeline.normalize_batch("myspace", [{}])

    def test_batch_raises_on_error(self, pipeline, sample_status):
        """By default a failing payload aborts the batch."""
        broken = make_status(sample_status, "2")
        broken["created_at"] = "not a date at all"
        raw_items = [make_status(sample_status, "1"), broken, make_status(sample_status, "3")]

        with pytest.raises(ParseError):
            pipeline.normalize_batch("mastodon", raw_items)

    def test_batch_skip_errors(self, pipeline, sample_status):
        """With skip_errors failing payloads are dropped."""
        broken = make_status(sample_status, "2")
        broken["created_at"] = ""
        raw_items = [make_status(sample_status, "1"), broken, make_status(sample_status, "3")]

        items = pipeline.normalize_batch("mastodon", raw_items, skip_errors=True)

        assert [item.source_id for item in items] == ["1", "3"]

    def test_batch_accepts_generators(self, pipeline, sample_status):
        """Any iterable of payloads is accepted."""
        raw_items = (make_status(sample_status, str(n)) for n in range(3))

        assert len(pipeline.normalize_batch("mastodon", raw_items)) == 3
