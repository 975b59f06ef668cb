"""Integration test configuration.

Remote APIs are mocked at the httpx transport with respx, so adapters run
their real HTTP client, retry and JSON handling against canned responses.
"""

import pytest

from content_importer.config.settings import Settings, get_settings
from content_importer.core.http import HttpClient

INSTANCE_URL = "https://mastodon.example"


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def http():
    """HTTP client without transport retries."""
    with HttpClient(timeout=5, max_retries=1) as client:
        yield client


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Run CLI commands with default settings from a clean working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONTENT_IMPORTER_APP_ENV", raising=False)
    monkeypatch.delenv("CONTENT_IMPORTER_LOG_JSON", raising=False)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


@pytest.fixture
def make_status(sample_status):
    """Return a factory copying the sample status under a new id."""

    def factory(status_id: str, **overrides) -> dict:
        status = {
            **sample_status,
            "id": status_id,
            "url": f"{INSTANCE_URL}/@bob/{status_id}",
            "uri": f"{INSTANCE_URL}/users/bob/statuses/{status_id}",
        }
        status.update(overrides)
        return status

    return factory
