"""Precanned Storage - PostgreSQL storage layer.

This package provides:
- Database connection management (asyncpg pooling, unit of work)
- ReportStore (precanned rows in reports)
- MarketingAssetStore (precanned rows in marketing_assets)
- CoverStore (precanned rows in book_covers)
- LandingPageStore (precanned rows in landing_pages)
- BookStore (pipeline status on the owning book)
- Precanned tag codec for the free-text metadata columns

Exclusive DB ownership - no shared database access from other packages.
"""

from precanned_storage.book_store import BookStore, PipelineStatus
from precanned_storage.connection import (
    DatabaseConfig,
    acquire_connection,
    check_connection_health,
    close_connection_pool,
    get_connection_pool,
    unit_of_work,
)
from precanned_storage.cover_store import CoverStore
from precanned_storage.landing_page_store import LandingPageStore
from precanned_storage.marketing_store import MarketingAssetStore
from precanned_storage.report_store import ReportStatus, ReportStore
from precanned_storage.tags import parse_tag, serialize_tag, tag_like_pattern

__version__ = "1.0.0"

__all__ = [
    # Connection
    "DatabaseConfig",
    "get_connection_pool",
    "close_connection_pool",
    "acquire_connection",
    "unit_of_work",
    "check_connection_health",
    # Stores
    "ReportStore",
    "ReportStatus",
    "MarketingAssetStore",
    "CoverStore",
    "LandingPageStore",
    "BookStore",
    "PipelineStatus",
    # Tags
    "serialize_tag",
    "parse_tag",
    "tag_like_pattern",
]
