"""Mastodon adapter.

Authenticates with an instance URL plus a personal access token, then pages
through the account's statuses with ``max_id``. The built manifest is kept
in the transient cache.
"""

from typing import Any, Optional

import structlog

from content_importer.adapters.base import AuthType, BaseAdapter, manifest_item_from_normalized
from content_importer.adapters.registry import register_adapter_class
from content_importer.core.exceptions import (
    AdapterNotFoundError,
    HttpRequestError,
    ImporterError,
)
from content_importer.core.http import HttpClient
from content_importer.core.storage import KeyValueStore, TransientCache
from content_importer.manifest.content_manifest import ContentManifest
from content_importer.manifest.content_type import ContentType
from content_importer.normalizer.base import ContentNormalizer
from content_importer.normalizer.platforms.mastodon import MastodonNormalizer
from content_importer.schema.settings_schema import SettingsSchema

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 40


@register_adapter_class("mastodon")
class MastodonAdapter(BaseAdapter):
    """Imports statuses from a Mastodon account.

    Args:
        store: Persistent store for credentials.
        cache: Expiring store for the manifest.
        normalizer: Status normalizer. Defaults to MastodonNormalizer.
        http: HTTP client.
        **kwargs: Key prefixes and cache TTL, see BaseAdapter.
    """

    def __init__(
        self,
        store: KeyValueStore,
        cache: TransientCache,
        normalizer: Optional[ContentNormalizer] = None,
        http: Optional[HttpClient] = None,
        **kwargs: Any,
    ):
        super().__init__(store, cache, http, **kwargs)
        self.normalizer = normalizer or MastodonNormalizer()

    def get_id(self) -> str:
        return "mastodon"

    def get_name(self) -> str:
        return "Mastodon"

    def get_description(self) -> str:
        return "Import posts, boosts and threads from a Mastodon account."

    def get_icon(self) -> str:
        return "mastodon"

    def get_auth_type(self) -> AuthType:
        return AuthType.API_KEY

    def get_supported_content_types(self) -> list[ContentType]:
        return [ContentType.POST, ContentType.THREAD, ContentType.REPLY, ContentType.REPOST]

    def build_settings_schema(self) -> SettingsSchema:
        return (
            SettingsSchema()
            .add_field(
                "instance_url",
                {
                    "type": "url",
                    "label": "Instance URL",
                    "required": True,
                    "placeholder": "https://mastodon.social",
                },
            )
            .add_field(
                "access_token",
                {
                    "type": "password",
                    "label": "Access token",
                    "description": "Token with the read:accounts and read:statuses scopes",
                    "required": True,
                },
            )
            .add_field(
                "page_size",
                {"type": "number", "label": "Page size", "min": 1, "max": MAX_PAGE_SIZE, "default": MAX_PAGE_SIZE},
            )
            .add_field(
                "max_pages",
                {"type": "number", "label": "Maximum pages", "min": 1, "max": 100, "default": 10},
            )
            .add_field(
                "include_replies",
                {"type": "checkbox", "label": "Include replies", "default": True},
            )
            .add_field(
                "include_reblogs",
                {"type": "checkbox", "label": "Include boosts", "default": True},
            )
        )

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def verify_credentials(self, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        instance_url = values["instance_url"].rstrip("/")
        try:
            account = self.http_get_json(
                f"{instance_url}/api/v1/accounts/verify_credentials",
                headers=self._auth_headers(values["access_token"]),
            )
        except HttpRequestError as e:
            if e.status_code in (401, 403):
                logger.warning(
                    "mastodon_credentials_rejected",
                    instance_url=instance_url,
                    status_code=e.status_code,
                )
                return None
            raise

        logger.info("mastodon_account_verified", instance_url=instance_url, acct=account.get("acct"))
        return {
            **values,
            "instance_url": instance_url,
            "account_id": str(account["id"]),
            "acct": account.get("acct"),
        }

    def disconnect(self) -> None:
        with self._lock:
            self.delete_cache("manifest")
            super().disconnect()

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    # -------------------------------------------------------------------------
    # Content
    # -------------------------------------------------------------------------

    def build_manifest(self, **options: Any) -> ContentManifest:
        """Page through the account's statuses.

        Only complete manifests are cached. A limited fetch is served from
        the cached manifest when there is one and is never stored itself.

        Args:
            **options: ``refresh=True`` bypasses the cached manifest;
                ``limit`` caps the number of items.
        """
        limit = options.get("limit")
        if not options.get("refresh"):
            cached = self.get_cache("manifest")
            if cached is not None:
                logger.debug("mastodon_manifest_cache_hit")
                return self._truncate(ContentManifest.from_array(cached), limit)

        credentials = self.get_stored_credentials()
        page_size = int(credentials.get("page_size") or MAX_PAGE_SIZE)
        max_pages = int(credentials.get("max_pages") or 10)

        url = f"{credentials['instance_url']}/api/v1/accounts/{credentials['account_id']}/statuses"
        params: dict[str, Any] = {
            "limit": page_size,
            "exclude_replies": "false" if credentials.get("include_replies", True) else "true",
            "exclude_reblogs": "false" if credentials.get("include_reblogs", True) else "true",
        }

        manifest = ContentManifest(self.get_id())
        for page_number in range(max_pages):
            page = self.http_get_json(
                url,
                headers=self._auth_headers(credentials["access_token"]),
                params=params,
            )
            if not page:
                break

            for status in page:
                if limit is not None and len(manifest) >= limit:
                    break
                try:
                    manifest.add_item(manifest_item_from_normalized(self.normalizer.normalize(status)))
                except ImporterError as e:
                    logger.warning(
                        "manifest_entry_skipped",
                        adapter_id=self.get_id(),
                        status_id=status.get("id"),
                        error=str(e),
                    )

            logger.debug("mastodon_page_fetched", page=page_number + 1, statuses=len(page))
            if len(page) < page_size or (limit is not None and len(manifest) >= limit):
                break
            params["max_id"] = page[-1]["id"]

        if limit is None:
            self.set_cache("manifest", manifest.to_array())
        return manifest

    @staticmethod
    def _truncate(manifest: ContentManifest, limit: Optional[int]) -> ContentManifest:
        if limit is None or len(manifest) <= limit:
            return manifest
        truncated = ContentManifest(manifest.source_id)
        for item in manifest.get_items()[:limit]:
            truncated.add_item(item)
        return truncated

    def load_item(self, item_id: str) -> dict[str, Any]:
        credentials = self.get_stored_credentials()
        try:
            return self.http_get_json(
                f"{credentials['instance_url']}/api/v1/statuses/{item_id}",
                headers=self._auth_headers(credentials["access_token"]),
            )
        except HttpRequestError as e:
            if e.status_code == 404:
                raise AdapterNotFoundError(
                    self.get_id(), f"Item not found: {item_id}", {"item_id": item_id}
                ) from e
            raise
