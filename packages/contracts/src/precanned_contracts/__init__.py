"""Precanned Contracts - Pure Pydantic schemas.

This package contains ONLY Pydantic schemas with no business logic.
Dependencies: pydantic only (no logging, no DB drivers).
"""

from precanned_contracts.models import (
    # Catalog
    Catalog,
    CatalogEntry,
    CoverSpec,
    LandingPageSpec,
    VideoSpec,
    # Assets
    MaterializedAsset,
    # Import
    ImportFeatureFlags,
    ImportResult,
    PrecannedTag,
)

__version__ = "1.0.0"

__all__ = [
    # Catalog
    "Catalog",
    "CatalogEntry",
    "CoverSpec",
    "LandingPageSpec",
    "VideoSpec",
    # Assets
    "MaterializedAsset",
    # Import
    "ImportFeatureFlags",
    "ImportResult",
    "PrecannedTag",
]
