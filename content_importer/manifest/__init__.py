"""Content manifests.

A manifest lists what a source offers for import, before any item is
fetched in full.
"""

from content_importer.manifest.content_type import ContentType
from content_importer.manifest.manifest_item import ManifestItem
from content_importer.manifest.content_manifest import ContentManifest

__all__ = [
    "ContentType",
    "ManifestItem",
    "ContentManifest",
]
