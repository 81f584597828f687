"""Precanned Engine - package matching and asset transformation.

Provides:
- CatalogService (manifest and uploads listing, memoized with reload)
- Filename normalization, first-match catalog resolution, scored cover search
- AssetMaterializer (copy-once into the servable tree)
- HTML image inlining and asset reference rewriting
- PrecannedImporter (idempotent multi-category import)
"""

from precanned_engine.importer import ContentStores, PrecannedImporter
from precanned_engine.inliner import extract_cover_image_data, inline_images
from precanned_engine.manifest import CatalogService
from precanned_engine.matching import (
    best_filename_match,
    core_name,
    cover_override_for,
    filenames_match,
    first_matching_entry,
    normalize_filename,
    score_filename_match,
)
from precanned_engine.materializer import AssetMaterializer, asset_filename, slugify
from precanned_engine.rewriter import rewrite_asset_references

__version__ = "1.0.0"

__all__ = [
    # Catalog
    "CatalogService",
    # Matching
    "normalize_filename",
    "core_name",
    "filenames_match",
    "score_filename_match",
    "best_filename_match",
    "first_matching_entry",
    "cover_override_for",
    # Assets
    "AssetMaterializer",
    "asset_filename",
    "slugify",
    "inline_images",
    "extract_cover_image_data",
    "rewrite_asset_references",
    # Import
    "ContentStores",
    "PrecannedImporter",
]
