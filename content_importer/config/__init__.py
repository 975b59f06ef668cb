"""
Configuration Management.

Settings are loaded from CONTENT_IMPORTER_* environment variables, then a
.env file, then defaults.

Example:
    from content_importer.config import get_settings

    settings = get_settings()
    timeout = settings.http_timeout_seconds
"""

from content_importer.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
