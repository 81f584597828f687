"""Configuration management.

Settings are read from environment variables (case-insensitive) and an
optional ``.env`` file. Use ``get_settings()`` for the cached instance;
``get_settings.cache_clear()`` forces a reload.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"console", "json"}


class Settings(BaseSettings):
    """Runtime settings for the precanned content engine."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    precanned_root: Path = Field(
        default=Path("precannedcontent"),
        description="Source asset tree holding the manifest and package files",
    )
    manifest_filename: str = Field(
        default="manifest.json",
        description="Manifest file name under precanned_root (JSON or YAML)",
    )
    uploads_dirname: str = Field(
        default="uploads",
        description="Sub-directory of precanned_root with standalone cover images",
    )
    public_root: Path = Field(
        default=Path("public/uploads/precanned"),
        description="Servable directory materialized assets are copied into",
    )
    public_url_prefix: str = Field(
        default="/uploads/precanned",
        description="URL prefix the static file server exposes public_root under",
    )
    api_url_prefix: str = Field(
        default="/api/uploads/precanned",
        description="URL prefix of the API route serving materialized assets",
    )
    max_slug_attempts: int = Field(
        default=20,
        ge=1,
        description="Maximum landing page slug probes before giving up",
    )
    analyzed_by: str = Field(
        default="system@precanned.local",
        description="Analyst identifier stamped on imported report rows",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: console or json")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return upper

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:
        lower = v.lower()
        if lower not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {sorted(_LOG_FORMATS)}")
        return lower

    @property
    def manifest_path(self) -> Path:
        return self.precanned_root / self.manifest_filename

    @property
    def uploads_dir(self) -> Path:
        return self.precanned_root / self.uploads_dirname


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
