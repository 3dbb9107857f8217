"""
Application configuration using Pydantic Settings.

This module defines the Settings object used across the service to configure:
- App metadata and environment
- Airbyte API credentials, token lifetime and HTTP resilience
- Export behavior and file paths
- Logging levels

Values are read from environment variables with sensible defaults for development.
Use a .env file in development; in production, set environment variables via the platform's secret management.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class AirbyteSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="AIRBYTE_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    api_url: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[SecretStr] = None
    token_path: str = "/oauth/token"
    timeout_seconds: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_max: float = 8.0
    token_refresh_margin_seconds: int = 30
    default_token_ttl_seconds: int = 180
    page_size: int = 100

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None

    @field_validator("max_retries", "page_size")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    def missing_credentials(self) -> List[str]:
        missing = []
        if not self.api_url:
            missing.append("AIRBYTE_API_URL")
        if not self.client_id:
            missing.append("AIRBYTE_CLIENT_ID")
        if self.client_secret is None or not self.client_secret.get_secret_value():
            missing.append("AIRBYTE_CLIENT_SECRET")
        return missing

    def require_credentials(self) -> None:
        """Raise ConfigurationError naming every unset credential key."""
        missing = self.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"Missing Airbyte configuration: {', '.join(missing)}",
                details={"missing": missing},
            )


class ExportSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EXPORT_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    data_path: str = "data"
    default_format: Literal["csv", "ndjson", "json"] = "csv"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App metadata
    APP_NAME: str = Field("airbyte-sync-service")
    ENV: Literal["dev", "test", "staging", "prod"] = Field("dev")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field("INFO")

    # Airbyte API credentials and HTTP behavior
    airbyte: AirbyteSettings = Field(default_factory=AirbyteSettings)

    # Export behavior and file paths
    export: ExportSettings = Field(default_factory=ExportSettings)

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance.

    Use lru_cache to avoid re-parsing environment variables. Tests clear the cache between cases.
    """
    settings = Settings()  # type: ignore[arg-type]

    # Exports land in data_path; create it eagerly outside staging/prod
    if settings.is_dev or settings.ENV == "test":
        Path(settings.export.data_path).mkdir(parents=True, exist_ok=True)

    return settings
