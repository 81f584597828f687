"""Precanned Common - shared errors, logging, and settings."""

from precanned_common.config import Settings, get_settings
from precanned_common.errors import (
    AssetError,
    AssetNotFoundError,
    CatalogError,
    PrecannedError,
    SlugCollisionError,
    StorageError,
)
from precanned_common.logging_config import configure_logging, get_logger

__version__ = "1.0.0"

__all__ = [
    # Errors
    "PrecannedError",
    "CatalogError",
    "AssetError",
    "AssetNotFoundError",
    "StorageError",
    "SlugCollisionError",
    # Logging
    "configure_logging",
    "get_logger",
    # Config
    "Settings",
    "get_settings",
]
