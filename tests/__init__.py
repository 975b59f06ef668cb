"""
Content Importer Test Suite.

This package contains all tests for the content importer:

- unit/: Value objects, schema validation, normalizers, adapters and services
- integration/: Mastodon adapter over mocked HTTP, container wiring and CLI
- conftest.py: Shared fixtures and test configuration

Run tests with: pytest
Run a single layer with: pytest tests/unit
"""
