"""HTTP collaborator for source adapters.

Wraps httpx with timeouts, a default User-Agent and retry of transport-level
failures. Status-code handling stays with the caller: `request` returns any
response, `get_json`/`post_json` turn non-2xx statuses and malformed bodies
into HttpRequestError carrying the status and body for diagnostics.

Example:
    with HttpClient(timeout=10) as client:
        data = client.get_json("https://example.social/api/v1/instance")
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from content_importer.core.exceptions import HttpRequestError, HttpTransportError
from content_importer.monitoring.metrics import record_http_request

logger = structlog.get_logger(__name__)


@dataclass
class HttpResponse:
    """Status code, body and headers of a completed request."""

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient:
    """Blocking HTTP client with transport retries.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Attempts for requests failing before a response arrives.
        user_agent: User-Agent header added to every request.
        client: Pre-built httpx.Client (tests inject one with a mock transport).
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: str = "ContentImporter/0.1.0",
        client: Optional[httpx.Client] = None,
    ):
        self._timeout = timeout
        self._max_retries = max_retries
        self._user_agent = user_agent
        self._client = client
        self._owns_client = client is None

    def __enter__(self) -> "HttpClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self._timeout),
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        data: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Send a request, retrying transport failures.

        Raises:
            HttpTransportError: When every attempt fails before a response.
        """
        client = self._ensure_client()
        request_timeout = timeout if timeout is not None else self._timeout

        retrying = Retrying(
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential_jitter(initial=0.5, max=10),
            retry=retry_if_exception_type(HttpTransportError),
            before_sleep=lambda retry_state: logger.warning(
                "http_retry",
                url=url,
                attempt=retry_state.attempt_number,
                error=str(retry_state.outcome.exception()),
            ),
            reraise=True,
        )

        for attempt in retrying:
            with attempt:
                response = self._send(
                    client,
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json_body=json_body,
                    data=data,
                    timeout=request_timeout,
                )

        return response

    def _send(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        *,
        headers: Optional[dict[str, str]],
        params: Optional[dict[str, Any]],
        json_body: Optional[Any],
        data: Optional[dict[str, Any]],
        timeout: float,
    ) -> HttpResponse:
        try:
            response = client.request(
                method.upper(),
                url,
                headers=headers,
                params=params,
                json=json_body,
                data=data,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            record_http_request(method, "timeout")
            logger.error("http_timeout", method=method, url=url, error=str(e))
            raise HttpTransportError(f"Request timeout: {e}", url=url) from e
        except httpx.RequestError as e:
            record_http_request(method, "error")
            logger.error("http_request_error", method=method, url=url, error=str(e))
            raise HttpTransportError(f"Request failed: {e}", url=url) from e

        record_http_request(method, response.status_code)
        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            headers=dict(response.headers),
            url=str(response.url),
        )

    def get(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, **kwargs)

    def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET a URL and decode its JSON body."""
        return self.parse_json_response(self.get(url, **kwargs))

    def post_json(self, url: str, **kwargs: Any) -> Any:
        """POST to a URL and decode its JSON body."""
        return self.parse_json_response(self.post(url, **kwargs))

    @staticmethod
    def parse_json_response(response: HttpResponse) -> Any:
        """Decode a response body, rejecting non-2xx statuses.

        Raises:
            HttpRequestError: On non-2xx status or malformed JSON.
        """
        if not response.ok:
            raise HttpRequestError(
                f"HTTP request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.body,
                url=response.url,
            )

        try:
            return json.loads(response.body)
        except json.JSONDecodeError as e:
            raise HttpRequestError(
                f"Failed to parse JSON response: {e.msg}",
                status_code=response.status_code,
                body=response.body,
                url=response.url,
            ) from e
