"""CoverStore - precanned rows in the book_covers table."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
from precanned_common import StorageError, get_logger

from precanned_storage.connection import acquire_connection
from precanned_storage.tags import tag_like_pattern

logger = get_logger(__name__)


class CoverStore:
    """Storage operations for book cover rows."""

    @staticmethod
    async def delete_precanned(
        book_id: str,
        package_key: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> int:
        """Delete covers previously imported from ``package_key``.

        Returns:
            Number of rows deleted
        """
        try:
            async with acquire_connection(conn) as c:
                result = await c.execute(
                    """
                    DELETE FROM book_covers
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
                "cover_delete_failed", book_id=book_id, package_key=package_key, error=str(e)
            )
            raise StorageError(f"Failed to delete precanned covers: {e}") from e

    @staticmethod
    async def create(
        book_id: str,
        cover_type: str,
        title: str,
        image_url: str,
        thumbnail_url: Optional[str],
        metadata: str,
        is_primary: bool = False,
        status: str = "completed",
        conn: Optional[asyncpg.Connection] = None,
    ) -> UUID:
        """Insert a cover row.

        Returns:
            UUID of the created cover
        """
        cover_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            async with acquire_connection(conn) as c:
                await c.execute(
                    """
                    INSERT INTO book_covers (
                        id, book_id, cover_type, title, image_url, thumbnail_url,
                        metadata, is_primary, status, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    """,
                    cover_id,
                    book_id,
                    cover_type,
                    title,
                    image_url,
                    thumbnail_url,
                    metadata,
                    is_primary,
                    status,
                    now,
                    now,
                )

            logger.info(
                "cover_created",
                cover_id=str(cover_id),
                book_id=book_id,
                cover_type=cover_type,
                is_primary=is_primary,
            )
            return cover_id

        except Exception as e:
            logger.error("cover_create_failed", book_id=book_id, error=str(e))
            raise StorageError(f"Failed to create cover: {e}") from e
