"""LandingPageStore - precanned rows in the landing_pages table.

Slugs are globally unique (unique index), so callers probe with
``slug_exists`` before inserting.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
from precanned_common import StorageError, get_logger

from precanned_storage.connection import acquire_connection
from precanned_storage.tags import tag_like_pattern

logger = get_logger(__name__)


class LandingPageStore:
    """Storage operations for landing page rows."""

    @staticmethod
    async def delete_precanned(
        book_id: str,
        package_key: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> int:
        """Delete landing pages previously imported from ``package_key``."""
        try:
            async with acquire_connection(conn) as c:
                result = await c.execute(
                    """
                    DELETE FROM landing_pages
                    WHERE book_id = $1
                    AND metadata IS NOT NULL
                    AND metadata LIKE $2
                    """,
                    book_id,
                    tag_like_pattern(package_key),
                )
                return int(result.split()[-1]) if result else 0

        except Exception as e:
            logger.error(
                "landing_delete_failed", book_id=book_id, package_key=package_key, error=str(e)
            )
            raise StorageError(f"Failed to delete precanned landing pages: {e}") from e

    @staticmethod
    async def slug_exists(slug: str, conn: Optional[asyncpg.Connection] = None) -> bool:
        """Check whether any landing page already uses ``slug``."""
        try:
            async with acquire_connection(conn) as c:
                row = await c.fetchrow(
                    "SELECT id FROM landing_pages WHERE slug = $1 LIMIT 1",
                    slug,
                )
                return row is not None

        except Exception as e:
            logger.error("landing_slug_probe_failed", slug=slug, error=str(e))
            raise StorageError(f"Failed to probe landing page slug: {e}") from e

    @staticmethod
    async def create(
        book_id: str,
        slug: str,
        title: str,
        headline: str,
        subheadline: str,
        description: str,
        html_content: str,
        metadata: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> UUID:
        """Insert a published landing page row.

        Returns:
            UUID of the created landing page
        """
        page_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            async with acquire_connection(conn) as c:
                await c.execute(
                    """
                    INSERT INTO landing_pages (
                        id, book_id, slug, title, headline, subheadline, description,
                        html_content, metadata, is_published, published_at, status,
                        created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, TRUE, $10, 'published', $10, $10)
                    """,
                    page_id,
                    book_id,
                    slug,
                    title,
                    headline,
                    subheadline,
                    description,
                    html_content,
                    metadata,
                    now,
                )

            logger.info("landing_page_created", page_id=str(page_id), book_id=book_id, slug=slug)
            return page_id

        except Exception as e:
            logger.error("landing_create_failed", book_id=book_id, slug=slug, error=str(e))
            raise StorageError(f"Failed to create landing page: {e}") from e
