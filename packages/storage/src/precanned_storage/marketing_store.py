"""MarketingAssetStore - precanned rows in the marketing_assets table."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
from precanned_common import StorageError, get_logger

from precanned_storage.connection import acquire_connection
from precanned_storage.tags import tag_like_pattern

logger = get_logger(__name__)


class MarketingAssetStore:
    """Storage operations for marketing asset rows (clips and HTML toolkits)."""

    @staticmethod
    async def delete_precanned(
        book_id: str,
        package_key: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> int:
        """Delete marketing assets previously imported from ``package_key``.

        Returns:
            Number of rows deleted
        """
        try:
            async with acquire_connection(conn) as c:
                result = await c.execute(
                    """
                    DELETE FROM marketing_assets
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
                "marketing_delete_failed", book_id=book_id, package_key=package_key, error=str(e)
            )
            raise StorageError(f"Failed to delete precanned marketing assets: {e}") from e

    @staticmethod
    async def create(
        book_id: str,
        asset_type: str,
        title: str,
        description: str,
        file_url: str,
        thumbnail_url: Optional[str],
        metadata: str,
        status: str = "completed",
        conn: Optional[asyncpg.Connection] = None,
    ) -> UUID:
        """Insert a marketing asset row.

        Args:
            book_id: Owning book
            asset_type: "video" or "html"
            title: Display title
            description: Display description
            file_url: Served URL of the asset ("" for inline HTML)
            thumbnail_url: Served URL of the poster image, if any
            metadata: Serialized precanned tag

        Returns:
            UUID of the created asset
        """
        asset_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            async with acquire_connection(conn) as c:
                await c.execute(
                    """
                    INSERT INTO marketing_assets (
                        id, book_id, asset_type, title, description, file_url,
                        thumbnail_url, metadata, status, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    """,
                    asset_id,
                    book_id,
                    asset_type,
                    title,
                    description,
                    file_url,
                    thumbnail_url,
                    metadata,
                    status,
                    now,
                    now,
                )

            logger.info(
                "marketing_asset_created",
                asset_id=str(asset_id),
                book_id=book_id,
                asset_type=asset_type,
            )
            return asset_id

        except Exception as e:
            logger.error("marketing_create_failed", book_id=book_id, error=str(e))
            raise StorageError(f"Failed to create marketing asset: {e}") from e
