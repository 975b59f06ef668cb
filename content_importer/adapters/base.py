"""Source adapter interface and shared adapter plumbing.

Every source integration implements Adapter. BaseAdapter supplies credential
persistence, transient caching, a lazily built settings schema, HTTP helpers
and the authentication guard, so concrete adapters only describe themselves,
validate credentials and build manifests/items.

Adapter lifecycle:
    Disconnected --authenticate()--> Authenticated --disconnect()--> Disconnected

``fetch_manifest``/``fetch_item`` raise AuthenticationRequiredError outside
the Authenticated state.
"""

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import structlog

from content_importer.core.exceptions import AuthenticationRequiredError
from content_importer.core.http import HttpClient
from content_importer.core.storage import KeyValueStore, TransientCache
from content_importer.manifest.content_manifest import ContentManifest
from content_importer.manifest.content_type import ContentType
from content_importer.manifest.manifest_item import ManifestItem
from content_importer.monitoring.metrics import track_adapter_operation
from content_importer.normalizer.item import NormalizedItem
from content_importer.schema.settings_schema import SettingsSchema

logger = structlog.get_logger(__name__)

DEFAULT_OPTION_PREFIX = "content_importer_adapter"
DEFAULT_CACHE_PREFIX = "content_importer"
DEFAULT_CACHE_TTL = 3600


class AuthType(str, Enum):
    """How an adapter obtains access to its source."""

    OAUTH = "oauth"
    API_KEY = "api_key"
    FILE_UPLOAD = "file_upload"
    SCRAPE = "scrape"


class Adapter(ABC):
    """Contract every source integration implements."""

    @abstractmethod
    def get_id(self) -> str:
        """Unique adapter id (e.g. ``mastodon``)."""
        ...

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def get_description(self) -> str: ...

    @abstractmethod
    def get_icon(self) -> str: ...

    @abstractmethod
    def get_auth_type(self) -> AuthType: ...

    @abstractmethod
    def authenticate(self, credentials: dict[str, Any]) -> bool:
        """Validate and persist credentials.

        Returns:
            True when the adapter is now authenticated.
        """
        ...

    @abstractmethod
    def is_authenticated(self) -> bool: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    @abstractmethod
    def fetch_manifest(self, **options: Any) -> ContentManifest:
        """List available content without fetching full bodies."""
        ...

    @abstractmethod
    def fetch_item(self, item_id: str) -> dict[str, Any]:
        """Fetch one raw platform payload."""
        ...

    @abstractmethod
    def get_settings_schema(self) -> SettingsSchema: ...

    @abstractmethod
    def get_supported_content_types(self) -> list[ContentType]: ...


def manifest_item_from_normalized(item: NormalizedItem, excerpt_length: int = 150) -> ManifestItem:
    """Describe a normalized item as a manifest entry."""
    author = None
    if item.author_name or item.author_url:
        author = {"name": item.author_name, "url": item.author_url}

    return ManifestItem(
        id=item.source_id,
        type=item.content_type,
        title=item.generate_title(),
        excerpt=item.get_excerpt(excerpt_length) or None,
        created_at=item.publish_date,
        media_urls=[ref.source_url for ref in item.media],
        metadata={"engagement": dict(item.engagement), "tags": list(item.tags)},
        parent_id=item.parent_id,
        original_url=item.source_url,
        author=author,
    )


class BaseAdapter(Adapter):
    """Shared implementation for adapters.

    Credentials live in the key-value store under ``<option_prefix>_<id>``,
    cache entries under ``<cache_prefix>_<id>_<suffix>``. Authentication
    and disconnection are serialized per adapter instance.

    Args:
        store: Persistent store for credentials.
        cache: Expiring store for manifests and lookups.
        http: HTTP client. One is built on first use when omitted.
        option_prefix: Credential key prefix.
        cache_prefix: Cache key prefix.
        cache_ttl: Default cache lifetime in seconds.
    """

    def __init__(
        self,
        store: KeyValueStore,
        cache: TransientCache,
        http: Optional[HttpClient] = None,
        option_prefix: str = DEFAULT_OPTION_PREFIX,
        cache_prefix: str = DEFAULT_CACHE_PREFIX,
        cache_ttl: int = DEFAULT_CACHE_TTL,
    ):
        self.store = store
        self.cache = cache
        self._http = http
        self.option_prefix = option_prefix
        self.cache_prefix = cache_prefix
        self.cache_ttl = cache_ttl
        self._credentials: Optional[dict[str, Any]] = None
        self._settings_schema: Optional[SettingsSchema] = None
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Credentials
    # -------------------------------------------------------------------------

    def get_option_name(self) -> str:
        return f"{self.option_prefix}_{self.get_id()}"

    def get_stored_credentials(self) -> dict[str, Any]:
        with self._lock:
            if self._credentials is None:
                self._credentials = self.store.get(self.get_option_name(), {}) or {}
            return dict(self._credentials)

    def store_credentials(self, credentials: dict[str, Any]) -> bool:
        with self._lock:
            self._credentials = dict(credentials)
            return self.store.set(self.get_option_name(), credentials)

    def clear_credentials(self) -> bool:
        with self._lock:
            self._credentials = None
            return self.store.delete(self.get_option_name())

    def is_authenticated(self) -> bool:
        return bool(self.get_stored_credentials())

    def authenticate(self, credentials: dict[str, Any]) -> bool:
        """Validate credentials against the settings schema, verify and store them.

        Raises:
            ValidationError: If the credentials fail schema validation.
        """
        with self._lock:
            values = self.get_settings_schema().validate_or_raise(credentials)
            with track_adapter_operation(self.get_id(), "authenticate"):
                verified = self.verify_credentials(values)

            if not verified:
                logger.warning("adapter_authentication_failed", adapter_id=self.get_id())
                return False

            self.store_credentials(verified)
            logger.info("adapter_authenticated", adapter_id=self.get_id())
            return True

    def verify_credentials(self, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Check validated settings against the source.

        Returns:
            The credentials to persist, or None when the source rejects them.
        """
        return values

    def disconnect(self) -> None:
        with self._lock:
            self.clear_credentials()
            logger.info("adapter_disconnected", adapter_id=self.get_id())

    def ensure_authenticated(self) -> None:
        """Raise AuthenticationRequiredError unless credentials are stored."""
        if not self.is_authenticated():
            raise AuthenticationRequiredError(
                self.get_id(),
                f"{self.get_name()} adapter is not authenticated.",
            )

    # -------------------------------------------------------------------------
    # Settings schema
    # -------------------------------------------------------------------------

    def get_settings_schema(self) -> SettingsSchema:
        with self._lock:
            if self._settings_schema is None:
                self._settings_schema = self.build_settings_schema()
            return self._settings_schema

    @abstractmethod
    def build_settings_schema(self) -> SettingsSchema:
        """Describe the adapter's configurable fields."""
        ...

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def fetch_manifest(self, **options: Any) -> ContentManifest:
        self.ensure_authenticated()
        with track_adapter_operation(self.get_id(), "fetch_manifest"):
            manifest = self.build_manifest(**options)
        logger.info(
            "manifest_fetched",
            adapter_id=self.get_id(),
            items=len(manifest),
        )
        return manifest

    def fetch_item(self, item_id: str) -> dict[str, Any]:
        self.ensure_authenticated()
        with track_adapter_operation(self.get_id(), "fetch_item"):
            return self.load_item(item_id)

    @abstractmethod
    def build_manifest(self, **options: Any) -> ContentManifest:
        """Build the manifest once authentication has been checked."""
        ...

    @abstractmethod
    def load_item(self, item_id: str) -> dict[str, Any]:
        """Load one raw payload once authentication has been checked."""
        ...

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def get_cache_key(self, suffix: str) -> str:
        return f"{self.cache_prefix}_{self.get_id()}_{suffix}"

    def get_cache(self, suffix: str) -> Any:
        return self.cache.get(self.get_cache_key(suffix))

    def set_cache(self, suffix: str, value: Any, ttl: Optional[int] = None) -> bool:
        return self.cache.set(
            self.get_cache_key(suffix),
            value,
            ttl if ttl is not None else self.cache_ttl,
        )

    def delete_cache(self, suffix: str) -> bool:
        return self.cache.delete(self.get_cache_key(suffix))

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    @property
    def http(self) -> HttpClient:
        if self._http is None:
            self._http = HttpClient()
        return self._http

    def http_get_json(self, url: str, **kwargs: Any) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            HttpRequestError: On non-2xx status or malformed JSON.
            HttpTransportError: When the request never completes.
        """
        return self.http.get_json(url, **kwargs)

    def http_post_json(self, url: str, body: Optional[Any] = None, **kwargs: Any) -> Any:
        """POST a JSON body and decode the JSON response."""
        return self.http.post_json(url, json_body=body, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.get_id()!r})"
