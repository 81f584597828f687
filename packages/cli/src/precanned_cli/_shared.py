"""Shared helpers for CLI commands."""

from precanned_common import configure_logging, get_settings
from precanned_engine import PrecannedImporter


def build_importer() -> PrecannedImporter:
    """Configure logging and build an importer from the current settings."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    return PrecannedImporter.from_settings(settings)
