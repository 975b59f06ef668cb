"""Integration tests for the Mastodon adapter against a mocked instance."""

import httpx
import pytest

from content_importer.adapters.mastodon import MastodonAdapter
from content_importer.core.exceptions import (
    AdapterNotFoundError,
    AuthenticationRequiredError,
    HttpRequestError,
    ValidationError,
)
from content_importer.manifest.content_type import ContentType

INSTANCE_URL = "https://mastodon.example"
VERIFY_URL = f"{INSTANCE_URL}/api/v1/accounts/verify_credentials"
STATUSES_URL = f"{INSTANCE_URL}/api/v1/accounts/42/statuses"


@pytest.fixture
def adapter(store, cache, http) -> MastodonAdapter:
    return MastodonAdapter(store, cache, http=http)


@pytest.fixture
def verify_route(respx_mock):
    return respx_mock.get(VERIFY_URL).mock(
        return_value=httpx.Response(200, json={"id": 42, "acct": "bob", "username": "bob"})
    )


@pytest.fixture
def connected(adapter, verify_route) -> MastodonAdapter:
    """Adapter authenticated with two statuses per page."""
    assert adapter.authenticate(
        {"instance_url": INSTANCE_URL + "/", "access_token": "token-123", "page_size": 2}
    )
    return adapter


@pytest.fixture
def timeline(make_status):
    """Three statuses served over two pages, newest first."""
    return [
        make_status("3", created_at="2024-01-15T12:00:00.000Z"),
        make_status("2", created_at="2024-01-15T11:00:00.000Z", in_reply_to_id="1", in_reply_to_account_id="42"),
        make_status("1", created_at="2024-01-15T10:00:00.000Z"),
    ]


@pytest.fixture
def statuses_route(respx_mock, timeline):
    """Serve the timeline honouring limit and max_id like the real API."""

    def page(request: httpx.Request) -> httpx.Response:
        limit = int(request.url.params.get("limit", 20))
        max_id = request.url.params.get("max_id")
        remaining = [s for s in timeline if max_id is None or int(s["id"]) < int(max_id)]
        return httpx.Response(200, json=remaining[:limit])

    return respx_mock.get(STATUSES_URL).mock(side_effect=page)


class TestAuthentication:
    """Tests for credential verification."""

    def test_authenticate_stores_account(self, connected, verify_route, store):
        """The verified account id is stored with the normalized instance URL."""
        credentials = connected.get_stored_credentials()

        assert credentials["instance_url"] == INSTANCE_URL
        assert credentials["account_id"] == "42"
        assert credentials["acct"] == "bob"
        assert credentials["page_size"] == 2
        assert credentials["max_pages"] == 10
        assert credentials["include_replies"] is True
        assert verify_route.calls.last.request.headers["Authorization"] == "Bearer token-123"
        assert store.get("content_importer_adapter_mastodon")["access_token"] == "token-123"

    def test_rejected_token(self, adapter, respx_mock):
        """401 from the instance means authentication failed."""
        respx_mock.get(VERIFY_URL).mock(return_value=httpx.Response(401, json={"error": "invalid token"}))

        assert adapter.authenticate({"instance_url": INSTANCE_URL, "access_token": "bad"}) is False
        assert adapter.is_authenticated() is False

    def test_server_error_propagates(self, adapter, respx_mock):
        """Other HTTP failures are raised, not treated as rejection."""
        respx_mock.get(VERIFY_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

        with pytest.raises(HttpRequestError) as exc_info:
            adapter.authenticate({"instance_url": INSTANCE_URL, "access_token": "t"})

        assert exc_info.value.status_code == 502

    def test_invalid_settings(self, adapter):
        """Malformed settings are rejected before any request."""
        with pytest.raises(ValidationError) as exc_info:
            adapter.authenticate({"instance_url": "not a url", "page_size": 100})

        codes = exc_info.value.errors.codes()
        assert codes == ["invalid_url", "required_field", "number_too_high"]

    def test_requires_authentication(self, adapter):
        """Content operations need credentials."""
        with pytest.raises(AuthenticationRequiredError):
            adapter.fetch_manifest()


class TestManifest:
    """Tests for paging through the account's statuses."""

    def test_pages_with_max_id(self, connected, statuses_route):
        """Pages are requested with max_id until a short page arrives."""
        manifest = connected.fetch_manifest()

        assert [item.id for item in manifest] == ["3", "2", "1"]
        assert statuses_route.call_count == 2

        first, second = (call.request.url.params for call in statuses_route.calls)
        assert first.get("max_id") is None
        assert first["limit"] == "2"
        assert first["exclude_replies"] == "false"
        assert second["max_id"] == "2"

    def test_relations(self, connected, statuses_route):
        """Self-replies become thread items pointing at their parent."""
        manifest = connected.fetch_manifest()

        item = manifest.get_item("2")
        assert item.type == ContentType.THREAD
        assert item.parent_id == "1"
        assert manifest.get_stats()["by_type"] == {"post": 2, "thread": 1}

    def test_manifest_is_cached(self, connected, statuses_route):
        """A second fetch is served from cache; refresh goes back to the API."""
        connected.fetch_manifest()
        cached = connected.fetch_manifest()

        assert statuses_route.call_count == 2
        assert len(cached) == 3

        connected.fetch_manifest(refresh=True)
        assert statuses_route.call_count == 4

    def test_limit(self, connected, statuses_route):
        """The limit option stops paging early."""
        manifest = connected.fetch_manifest(limit=1)

        assert [item.id for item in manifest] == ["3"]
        assert statuses_route.call_count == 1

    def test_limited_manifest_not_cached(self, connected, statuses_route):
        """A limited fetch does not leave a truncated manifest in the cache."""
        limited = connected.fetch_manifest(limit=1)
        full = connected.fetch_manifest()

        assert len(limited) == 1
        assert [item.id for item in full] == ["3", "2", "1"]
        assert statuses_route.call_count == 3

    def test_limit_applied_to_cached_manifest(self, connected, statuses_route):
        """A cached full manifest answers limited fetches without new requests."""
        connected.fetch_manifest()

        first_two = connected.fetch_manifest(limit=2)
        everything = connected.fetch_manifest()

        assert [item.id for item in first_two] == ["3", "2"]
        assert len(everything) == 3
        assert statuses_route.call_count == 2

    def test_max_pages(self, adapter, verify_route, statuses_route):
        """Paging stops at max_pages."""
        adapter.authenticate(
            {"instance_url": INSTANCE_URL, "access_token": "t", "page_size": 1, "max_pages": 2}
        )

        manifest = adapter.fetch_manifest()

        assert len(manifest) == 2
        assert statuses_route.call_count == 2

    def test_exclude_replies(self, adapter, verify_route, statuses_route):
        """Excluded replies and boosts are requested from the API."""
        adapter.authenticate(
            {
                "instance_url": INSTANCE_URL,
                "access_token": "t",
                "include_replies": False,
                "include_reblogs": "0",
            }
        )

        adapter.fetch_manifest()

        params = statuses_route.calls.last.request.url.params
        assert params["exclude_replies"] == "true"
        assert params["exclude_reblogs"] == "true"

    def test_empty_timeline(self, connected, respx_mock):
        """An account without statuses has an empty manifest."""
        respx_mock.get(STATUSES_URL).mock(return_value=httpx.Response(200, json=[]))

        assert connected.fetch_manifest().is_empty() is True

    def test_broken_status_skipped(self, connected, respx_mock, make_status):
        """Statuses that fail to normalize are left out."""
        route = respx_mock.get(STATUSES_URL).mock(
            side_effect=[
                httpx.Response(200, json=[make_status("5", created_at=""), make_status("4")]),
                httpx.Response(200, json=[]),
            ]
        )

        manifest = connected.fetch_manifest()

        assert [item.id for item in manifest] == ["4"]
        assert route.call_count == 2

    def test_disconnect_drops_cached_manifest(self, connected, statuses_route):
        """Disconnecting clears credentials and the cached manifest."""
        connected.fetch_manifest()

        connected.disconnect()

        assert connected.get_cache("manifest") is None
        assert connected.is_authenticated() is False


class TestFetchItem:
    """Tests for single status lookup."""

    def test_fetch_item(self, connected, respx_mock, make_status):
        """Statuses are fetched by id with the stored token."""
        route = respx_mock.get(f"{INSTANCE_URL}/api/v1/statuses/3").mock(
            return_value=httpx.Response(200, json=make_status("3"))
        )

        payload = connected.fetch_item("3")

        assert payload["id"] == "3"
        assert route.calls.last.request.headers["Authorization"] == "Bearer token-123"

    def test_fetch_item_not_found(self, connected, respx_mock):
        """404 becomes AdapterNotFoundError."""
        respx_mock.get(f"{INSTANCE_URL}/api/v1/statuses/999").mock(
            return_value=httpx.Response(404, json={"error": "Record not found"})
        )

        with pytest.raises(AdapterNotFoundError) as exc_info:
            connected.fetch_item("999")

        assert exc_info.value.details == {"item_id": "999"}

    def test_fetch_item_normalizes(self, connected, respx_mock, make_status):
        """Fetched payloads feed straight into the normalizer."""
        respx_mock.get(f"{INSTANCE_URL}/api/v1/statuses/3").mock(
            return_value=httpx.Response(200, json=make_status("3"))
        )

        item = connected.normalizer.normalize(connected.fetch_item("3"))

        assert item.source_id == "3"
        assert item.source_url == f"{INSTANCE_URL}/@bob/3"
