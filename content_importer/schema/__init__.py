"""Settings schemas describing and validating adapter configuration."""

from content_importer.schema.settings_schema import (
    FIELD_TYPES,
    SettingsSchema,
)

__all__ = [
    "FIELD_TYPES",
    "SettingsSchema",
]
