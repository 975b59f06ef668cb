"""
Dependency container for the content importer.

Owns the shared services (stores, HTTP client, registry, pipeline) and wires
the bundled adapters and normalizers together.

Usage:
    container = ImporterContainer()
    container.register_default_adapters()

    adapter = container.registry.require("mastodon")
    adapter.authenticate({...})

    container.close()
"""

from __future__ import annotations

from typing import Any

import structlog

from content_importer.adapters.base import BaseAdapter
from content_importer.adapters.registry import AdapterRegistry, get_adapter_class
from content_importer.config.settings import Settings, get_settings
from content_importer.core.events import EventEmitter
from content_importer.core.http import HttpClient
from content_importer.core.storage import InMemoryCache, InMemoryKeyValueStore, KeyValueStore, TransientCache
from content_importer.normalizer.date_converter import DateConverter
from content_importer.normalizer.html_sanitizer import HtmlSanitizer
from content_importer.normalizer.pipeline import NormalizationPipeline
from content_importer.normalizer.platforms.instagram import InstagramNormalizer
from content_importer.normalizer.platforms.mastodon import MastodonNormalizer
from content_importer.normalizer.platforms.twitter import TwitterNormalizer

logger = structlog.get_logger(__name__)

DEFAULT_ADAPTER_IDS = ("twitter_archive", "instagram_export", "mastodon")


class ImporterContainer:
    """
    Central container for importer services.

    Services are built eagerly from settings; stores can be replaced with
    persistent implementations by passing them in.

    Example:
        container = ImporterContainer(store=my_option_store)
        container.register_default_adapters()
        manifest = container.registry.require("twitter_archive").fetch_manifest()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: KeyValueStore | None = None,
        cache: TransientCache | None = None,
        http: HttpClient | None = None,
    ):
        """
        Initialize the container.

        Args:
            settings: Application settings. Defaults to get_settings().
            store: Credential store. Defaults to an in-memory store.
            cache: Transient cache. Defaults to an in-memory cache.
            http: HTTP client. Defaults to one built from settings.
        """
        self._settings = settings or get_settings()
        self.store = store if store is not None else InMemoryKeyValueStore()
        self.cache = cache if cache is not None else InMemoryCache()
        self.http = http or HttpClient(
            timeout=self._settings.http_timeout_seconds,
            max_retries=self._settings.http_max_retries,
            user_agent=self._settings.http_user_agent,
        )
        self.events = EventEmitter()
        self.registry = AdapterRegistry(self.events)
        self.pipeline = NormalizationPipeline(max_workers=self._settings.normalize_max_workers)
        self.date_converter = DateConverter(
            timezone_string=self._settings.timezone_string,
            gmt_offset=self._settings.gmt_offset,
        )
        self.sanitizer = HtmlSanitizer()

        logger.info("importer_container_created", app_env=self._settings.app_env)

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    def create_adapter(self, adapter_id: str, **kwargs: Any) -> BaseAdapter:
        """
        Build an adapter from the class catalog with the shared services.

        Args:
            adapter_id: Id the adapter class is registered under.
            **kwargs: Extra constructor arguments (e.g. a normalizer).

        Raises:
            AdapterNotFoundError: If no class is registered under the id.
        """
        adapter_cls = get_adapter_class(adapter_id)
        return adapter_cls(
            self.store,
            self.cache,
            http=self.http,
            option_prefix=self._settings.option_prefix,
            cache_prefix=self._settings.cache_prefix,
            cache_ttl=self._settings.cache_ttl_seconds,
            **kwargs,
        )

    def register_default_adapters(self) -> None:
        """Register the bundled adapters and their normalizers."""
        normalizers = {
            "twitter_archive": TwitterNormalizer(
                sanitizer=self.sanitizer, date_converter=self.date_converter
            ),
            "instagram_export": InstagramNormalizer(
                sanitizer=self.sanitizer, date_converter=self.date_converter
            ),
            "mastodon": MastodonNormalizer(
                sanitizer=self.sanitizer, date_converter=self.date_converter
            ),
        }

        for adapter_id in DEFAULT_ADAPTER_IDS:
            if self.registry.has(adapter_id):
                continue
            normalizer = normalizers[adapter_id]
            self.pipeline.register_normalizer(normalizer)
            self.registry.register(self.create_adapter(adapter_id, normalizer=normalizer))

        logger.info("default_adapters_registered", adapters=list(DEFAULT_ADAPTER_IDS))

    def close(self) -> None:
        """Release the HTTP client."""
        logger.info("importer_container_closing")
        self.http.close()
        logger.info("importer_container_closed")

    def __enter__(self) -> "ImporterContainer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
