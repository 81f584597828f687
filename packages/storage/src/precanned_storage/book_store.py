"""BookStore - header-row writes on the books table."""

from datetime import datetime, timezone
from typing import Optional

import asyncpg
from precanned_common import StorageError, get_logger

from precanned_storage.connection import acquire_connection

logger = get_logger(__name__)


class PipelineStatus:
    """Book pipeline status constants."""

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    READY = "ready"


class BookStore:
    """Storage operations on the owning book's header row."""

    @staticmethod
    async def set_pipeline_status(
        book_id: str,
        status: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> None:
        """Update a book's pipeline status.

        Raises:
            StorageError: If the book does not exist or the update fails
        """
        try:
            async with acquire_connection(conn) as c:
                result = await c.execute(
                    """
                    UPDATE books
                    SET pipeline_status = $1, updated_at = $2
                    WHERE id = $3
                    """,
                    status,
                    datetime.now(timezone.utc),
                    book_id,
                )

                if result == "UPDATE 0":
                    raise StorageError(f"Book not found: {book_id}")

                logger.info("book_pipeline_status_updated", book_id=book_id, status=status)

        except StorageError:
            raise
        except Exception as e:
            logger.error("book_status_update_failed", book_id=book_id, error=str(e))
            raise StorageError(f"Failed to update pipeline status: {e}") from e
