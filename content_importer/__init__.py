"""
Content Importer - normalize social platform content for import into a site.

This package contains:
- adapters: Source adapters (file exports and APIs) and their registry
- normalizer: Platform normalizers, HTML sanitizing, date conversion, media
- manifest: Content manifests describing what a source offers
- schema: Settings schemas used to validate adapter credentials
- core: Exceptions, HTTP client, storage, events and the service container
- config: Pydantic settings
- monitoring: Prometheus metrics
"""

__version__ = "0.1.0"
