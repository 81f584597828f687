"""ReportStore - precanned rows in the reports table.

Reports hang off a book version, not the book itself. Each imported package
contributes a ``preview`` row and a ``completed`` row.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
from precanned_common import StorageError, get_logger

from precanned_storage.connection import acquire_connection
from precanned_storage.tags import tag_like_pattern

logger = get_logger(__name__)


class ReportStatus:
    """Report status constants."""

    PENDING = "pending"
    PREVIEW = "preview"
    COMPLETED = "completed"


class ReportStore:
    """Storage operations for report rows."""

    @staticmethod
    async def delete_precanned(
        book_version_id: str,
        package_key: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> int:
        """Delete reports previously imported from ``package_key``.

        Args:
            book_version_id: Owning book version
            package_key: Catalog key recorded in the admin notes tag
            conn: Connection to run on (default: borrow from pool)

        Returns:
            Number of rows deleted
        """
        try:
            async with acquire_connection(conn) as c:
                result = await c.execute(
                    """
                    DELETE FROM reports
                    WHERE book_version_id = $1
                    AND admin_notes IS NOT NULL
                    AND admin_notes LIKE $2
                    """,
                    book_version_id,
                    tag_like_pattern(package_key),
                )
                deleted = int(result.split()[-1]) if result else 0
                logger.debug(
                    "precanned_reports_deleted",
                    book_version_id=book_version_id,
                    package_key=package_key,
                    deleted=deleted,
                )
                return deleted

        except Exception as e:
            logger.error(
                "report_delete_failed",
                book_version_id=book_version_id,
                package_key=package_key,
                error=str(e),
            )
            raise StorageError(f"Failed to delete precanned reports: {e}") from e

    @staticmethod
    async def create(
        book_version_id: str,
        status: str,
        html_content: str,
        admin_notes: str,
        analyzed_by: str,
        conn: Optional[asyncpg.Connection] = None,
    ) -> UUID:
        """Insert a finished report row.

        Returns:
            UUID of the created report

        Raises:
            StorageError: If the insert fails
        """
        report_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            async with acquire_connection(conn) as c:
                await c.execute(
                    """
                    INSERT INTO reports (
                        id, book_version_id, status, html_content, admin_notes,
                        requested_at, completed_at, analyzed_by
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    report_id,
                    book_version_id,
                    status,
                    html_content,
                    admin_notes,
                    now,
                    now,
                    analyzed_by,
                )

            logger.info(
                "report_created",
                report_id=str(report_id),
                book_version_id=book_version_id,
                status=status,
            )
            return report_id

        except Exception as e:
            logger.error("report_create_failed", book_version_id=book_version_id, error=str(e))
            raise StorageError(f"Failed to create report: {e}") from e
