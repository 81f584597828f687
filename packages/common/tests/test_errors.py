"""Tests for the error hierarchy and logging helpers."""

import pytest

from precanned_common import (
    AssetError,
    AssetNotFoundError,
    CatalogError,
    PrecannedError,
    SlugCollisionError,
    StorageError,
    configure_logging,
    get_logger,
)

pytestmark = pytest.mark.unit


class TestErrorHierarchy:
    """All engine errors share one base so callers can catch broadly."""

    @pytest.mark.parametrize(
        "error_cls",
        [CatalogError, AssetError, AssetNotFoundError, StorageError, SlugCollisionError],
    )
    def test_subclasses_base(self, error_cls):
        """Callers can catch every engine error through PrecannedError."""
        assert issubclass(error_cls, PrecannedError)

    def test_asset_not_found_is_asset_error(self):
        assert issubclass(AssetNotFoundError, AssetError)

    def test_slug_collision_is_storage_error(self):
        assert issubclass(SlugCollisionError, StorageError)


class TestLogging:
    """configure_logging accepts both renderers; loggers take keyword context."""

    @pytest.mark.parametrize("fmt", ["console", "json"])
    def test_configure_and_log(self, fmt):
        """Both renderers accept keyword event context."""
        configure_logging(level="DEBUG", fmt=fmt)
        logger = get_logger("precanned.test")

        logger.info("test_event", package_key="wool", count=2)
