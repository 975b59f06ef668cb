"""
Application Settings.

Centralized configuration using Pydantic Settings with environment variable loading.
Every variable is prefixed with CONTENT_IMPORTER_ (e.g. CONTENT_IMPORTER_LOG_LEVEL).

Production Mode:
    When app_env="production", additional validations apply:
    - log_json must be True
    - http_timeout_seconds must be bounded
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_IMPORTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Render log lines as JSON instead of console output",
    )

    # -------------------------------------------------------------------------
    # Site Timezone
    # -------------------------------------------------------------------------
    timezone_string: str | None = Field(
        default=None,
        description="IANA timezone name of the target site (e.g. Europe/Berlin)",
    )
    gmt_offset: float = Field(
        default=0.0,
        ge=-14.0,
        le=14.0,
        description="Numeric GMT offset in hours, used when timezone_string is unset",
    )

    # -------------------------------------------------------------------------
    # Storage Keys
    # -------------------------------------------------------------------------
    option_prefix: str = Field(
        default="content_importer_adapter",
        description="Key prefix for persisted adapter credentials",
    )
    cache_prefix: str = Field(
        default="content_importer",
        description="Key prefix for transient adapter cache entries",
    )
    cache_ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="Default lifetime of transient cache entries",
    )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for outbound HTTP requests in seconds",
    )
    http_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for requests failing at the transport level",
    )
    http_user_agent: str = Field(
        default="ContentImporter/0.1.0",
        description="User-Agent header sent to source platforms",
    )

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------
    normalize_max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Worker threads used by batch normalization",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production settings are suitable for log shipping."""
        if self.app_env == "production":
            errors = []

            if not self.log_json:
                errors.append("log_json must be True in production")

            if self.http_timeout_seconds > 120:
                errors.append("http_timeout_seconds cannot exceed 120 in production")

            if errors:
                raise ValueError(
                    f"Production configuration errors: {'; '.join(errors)}"
                )

        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings if needed.
    """
    return Settings()
