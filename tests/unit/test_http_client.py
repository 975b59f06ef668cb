"""Unit tests for HttpClient using respx-mocked transports."""

import json

import httpx
import pytest

from content_importer.core.exceptions import HttpRequestError, HttpTransportError
from content_importer.core.http import HttpClient, HttpResponse

API_URL = "https://example.social/api/v1/instance"


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Skip retry back-off waits."""
    monkeypatch.setattr("time.sleep", lambda seconds: None)


@pytest.fixture
def client():
    with HttpClient(timeout=5, max_retries=3, user_agent="TestAgent/1.0") as http:
        yield http


class TestHttpResponse:
    """Test the response value object."""

    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (299, True), (301, False), (404, False)])
    def test_ok(self, status, ok):
        """Only 2xx statuses are ok."""
        assert HttpResponse(status_code=status, body="").ok is ok


class TestRequests:
    """Test request sending."""

    def test_get_json(self, client, respx_mock):
        """JSON bodies are decoded; the User-Agent is sent."""
        route = respx_mock.get(API_URL).mock(return_value=httpx.Response(200, json={"title": "Example"}))

        assert client.get_json(API_URL) == {"title": "Example"}
        assert route.calls.last.request.headers["User-Agent"] == "TestAgent/1.0"

    def test_params_and_headers(self, client, respx_mock):
        """Query parameters and extra headers are passed through."""
        route = respx_mock.get(API_URL, params={"limit": "5"}).mock(return_value=httpx.Response(200, json=[]))

        client.get_json(API_URL, params={"limit": 5}, headers={"Authorization": "Bearer t"})

        assert route.called
        assert route.calls.last.request.headers["Authorization"] == "Bearer t"

    def test_post_json(self, client, respx_mock):
        """JSON bodies are sent and responses decoded."""
        route = respx_mock.post(API_URL).mock(return_value=httpx.Response(201, json={"id": 1}))

        assert client.post_json(API_URL, json_body={"a": 1}) == {"id": 1}
        assert json.loads(route.calls.last.request.content) == {"a": 1}

    def test_request_returns_error_statuses(self, client, respx_mock):
        """request() returns non-2xx responses without raising."""
        respx_mock.get(API_URL).mock(return_value=httpx.Response(503, text="busy"))

        response = client.get(API_URL)

        assert response.status_code == 503
        assert response.body == "busy"
        assert response.ok is False


class TestJsonErrors:
    """Test error translation in get_json/post_json."""

    def test_non_2xx(self, client, respx_mock):
        """Non-2xx statuses raise HttpRequestError with diagnostics."""
        respx_mock.get(API_URL).mock(return_value=httpx.Response(401, text='{"error": "denied"}'))

        with pytest.raises(HttpRequestError) as exc_info:
            client.get_json(API_URL)

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == '{"error": "denied"}'
        assert exc_info.value.url == API_URL

    def test_malformed_json(self, client, respx_mock):
        """Undecodable bodies raise HttpRequestError."""
        respx_mock.get(API_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(HttpRequestError) as exc_info:
            client.get_json(API_URL)

        assert exc_info.value.status_code == 200
        assert "Failed to parse JSON response" in exc_info.value.message

    def test_status_errors_not_retried(self, client, respx_mock):
        """A response of any status ends the retry loop."""
        route = respx_mock.get(API_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(HttpRequestError):
            client.get_json(API_URL)

        assert route.call_count == 1


class TestTransportRetries:
    """Test retries of failures before a response."""

    def test_retry_then_success(self, client, respx_mock):
        """A dropped connection is retried."""
        route = respx_mock.get(API_URL).mock(
            side_effect=[httpx.ConnectError("connection reset"), httpx.Response(200, json={"ok": True})]
        )

        assert client.get_json(API_URL) == {"ok": True}
        assert route.call_count == 2

    def test_gives_up_after_max_retries(self, client, respx_mock):
        """Persistent timeouts raise HttpTransportError after every attempt."""
        route = respx_mock.get(API_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(HttpTransportError) as exc_info:
            client.get(API_URL)

        assert route.call_count == 3
        assert exc_info.value.url == API_URL
        assert "Request timeout" in exc_info.value.message


class TestLifecycle:
    """Test client ownership."""

    def test_injected_client_not_closed(self):
        """An injected httpx.Client stays open after close()."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"via": "mock"}))
        inner = httpx.Client(transport=transport)

        http = HttpClient(client=inner)
        assert http.get_json("https://example.com/") == {"via": "mock"}
        http.close()

        assert inner.is_closed is False
        inner.close()

    def test_owned_client_closed(self):
        """A client built by HttpClient is closed with it."""
        http = HttpClient()
        inner = http._ensure_client()

        http.close()

        assert inner.is_closed is True
