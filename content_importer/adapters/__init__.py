"""
Source adapters.

Adapters authenticate against a source, describe its content as a manifest
and load raw payloads. Importing this package registers the bundled adapter
classes in the class catalog.

Example:
    from content_importer.adapters import AdapterRegistry, get_adapter_class

    registry = AdapterRegistry()
    registry.register(get_adapter_class("mastodon")(store, cache))
"""

from content_importer.adapters.base import Adapter, AuthType, BaseAdapter
from content_importer.adapters.registry import (
    AdapterRegistry,
    get_adapter_class,
    list_adapter_classes,
    register_adapter_class,
)
from content_importer.adapters.file_export import FileExportAdapter
from content_importer.adapters.instagram_export import InstagramExportAdapter
from content_importer.adapters.mastodon import MastodonAdapter
from content_importer.adapters.twitter_archive import TwitterArchiveAdapter

__all__ = [
    "Adapter",
    "AuthType",
    "BaseAdapter",
    "AdapterRegistry",
    "get_adapter_class",
    "list_adapter_classes",
    "register_adapter_class",
    "FileExportAdapter",
    "InstagramExportAdapter",
    "MastodonAdapter",
    "TwitterArchiveAdapter",
]
