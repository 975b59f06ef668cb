"""Adapters backed by a downloaded platform export file.

The user uploads the export; "authenticating" means pointing the adapter at
a readable export. Parsed entries are kept in the transient cache so the
file is read once per cache lifetime.
"""

import json
from abc import abstractmethod
from pathlib import Path
from typing import Any, Optional

import structlog

from content_importer.adapters.base import AuthType, BaseAdapter, manifest_item_from_normalized
from content_importer.core.exceptions import (
    AdapterNotFoundError,
    ExportFileError,
    ImporterError,
)
from content_importer.core.http import HttpClient
from content_importer.core.storage import KeyValueStore, TransientCache
from content_importer.manifest.content_manifest import ContentManifest
from content_importer.normalizer.base import ContentNormalizer
from content_importer.schema.settings_schema import SettingsSchema

logger = structlog.get_logger(__name__)


class FileExportAdapter(BaseAdapter):
    """Base for adapters reading a JSON export.

    Subclasses provide the description, the normalizer used to describe
    entries in the manifest, and how ids are read from entries.

    Args:
        store: Persistent store for credentials.
        cache: Expiring store for parsed entries.
        normalizer: Normalizer for this export's payloads.
        http: Unused by file adapters; accepted for a uniform constructor.
        **kwargs: Key prefixes and cache TTL, see BaseAdapter.
    """

    file_accept = ".json"

    def __init__(
        self,
        store: KeyValueStore,
        cache: TransientCache,
        normalizer: Optional[ContentNormalizer] = None,
        http: Optional[HttpClient] = None,
        **kwargs: Any,
    ):
        super().__init__(store, cache, http, **kwargs)
        self.normalizer = normalizer or self.default_normalizer()

    def get_auth_type(self) -> AuthType:
        return AuthType.FILE_UPLOAD

    def build_settings_schema(self) -> SettingsSchema:
        return SettingsSchema().add_field(
            "file",
            {
                "type": "file",
                "label": "Export file",
                "description": f"Path to the {self.get_name()} export",
                "required": True,
                "accept": self.file_accept,
            },
        )

    def verify_credentials(self, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        path = Path(str(values["file"]))
        if not path.is_file():
            logger.warning("export_file_missing", adapter_id=self.get_id(), path=str(path))
            return None

        entries = self.read_export(path)
        self.set_cache("entries", entries)
        return {"file": str(path)}

    def disconnect(self) -> None:
        with self._lock:
            self.delete_cache("entries")
            super().disconnect()

    # -------------------------------------------------------------------------
    # Export parsing
    # -------------------------------------------------------------------------

    def read_export(self, path: Path) -> list[dict[str, Any]]:
        """Read and decode an export file.

        Raises:
            ExportFileError: If the file is unreadable, not valid JSON or not
                a list of entries.
        """
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise ExportFileError(
                f"Could not read export file: {e}",
                {"adapter_id": self.get_id(), "path": str(path)},
            ) from e

        try:
            entries = self.parse_export(text)
        except json.JSONDecodeError as e:
            raise ExportFileError(
                f"Export file is not valid JSON: {e.msg}",
                {"adapter_id": self.get_id(), "path": str(path), "line": e.lineno},
            ) from e
        except ExportFileError as e:
            raise ExportFileError(e.message, {**e.details, "path": str(path)}) from e

        logger.info("export_parsed", adapter_id=self.get_id(), entries=len(entries))
        return entries

    def parse_export(self, text: str) -> list[dict[str, Any]]:
        """Decode export text into raw entries. Override for wrapped formats."""
        data = json.loads(text)
        if isinstance(data, dict):
            data = [data]
        return self.entry_list(data)

    def entry_list(self, data: Any) -> list[dict[str, Any]]:
        """Keep the object entries of a decoded export list.

        Raises:
            ExportFileError: If the export does not decode to a list.
        """
        if not isinstance(data, list):
            raise ExportFileError(
                f"Export must contain a list of entries, got {type(data).__name__}",
                {"adapter_id": self.get_id()},
            )
        return [entry for entry in data if isinstance(entry, dict)]

    def get_entries(self) -> list[dict[str, Any]]:
        """Raw entries of the authenticated export, cached."""
        entries = self.get_cache("entries")
        if entries is None:
            path = Path(self.get_stored_credentials()["file"])
            entries = self.read_export(path)
            self.set_cache("entries", entries)
        return entries

    @abstractmethod
    def entry_id(self, entry: dict[str, Any]) -> str:
        """Id of a raw export entry."""
        ...

    @abstractmethod
    def default_normalizer(self) -> ContentNormalizer: ...

    # -------------------------------------------------------------------------
    # Manifest and items
    # -------------------------------------------------------------------------

    def build_manifest(self, **options: Any) -> ContentManifest:
        """Describe every readable entry.

        Entries that fail normalization (no date, no id) are logged and left
        out of the manifest.
        """
        manifest = ContentManifest(self.get_id())
        limit = options.get("limit")

        for index, entry in enumerate(self.get_entries()):
            if limit is not None and len(manifest) >= limit:
                break
            try:
                item = self.normalizer.normalize(entry)
            except ImporterError as e:
                logger.warning(
                    "manifest_entry_skipped",
                    adapter_id=self.get_id(),
                    index=index,
                    error=str(e),
                )
                continue
            manifest.add_item(manifest_item_from_normalized(item))

        return manifest

    def load_item(self, item_id: str) -> dict[str, Any]:
        for entry in self.get_entries():
            if self.entry_id(entry) == item_id:
                return entry
        raise AdapterNotFoundError(self.get_id(), f"Item not found: {item_id}", {"item_id": item_id})
