"""Tests for the precanned content stores.

Tests cover:
- delete_precanned: tag LIKE pattern, parse of DELETE result, caller connection reuse
- create: UUID returned, insert arguments, pool borrowing when no connection given
- LandingPageStore.slug_exists: found and not-found
- BookStore.set_pipeline_status: missing book raises
- Error propagation as StorageError
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest

from precanned_common import StorageError
from precanned_storage import (
    BookStore,
    CoverStore,
    LandingPageStore,
    MarketingAssetStore,
    PipelineStatus,
    ReportStatus,
    ReportStore,
)

pytestmark = pytest.mark.unit

BOOK_ID = "6f1c2a7e-0000-4000-8000-000000000001"
VERSION_ID = "6f1c2a7e-0000-4000-8000-000000000002"


def _make_mock_pool(conn_mock):
    """Create a mock connection pool wrapping the given connection mock."""
    pool = MagicMock()
    ctx = AsyncMock()
    ctx.__aenter__ = AsyncMock(return_value=conn_mock)
    ctx.__aexit__ = AsyncMock(return_value=False)
    pool.acquire.return_value = ctx
    return pool


class TestStatusConstants:
    """Tests for status constants."""

    def test_report_statuses_distinct(self):
        statuses = [ReportStatus.PENDING, ReportStatus.PREVIEW, ReportStatus.COMPLETED]
        assert len(set(statuses)) == len(statuses)

    def test_ready_status(self):
        assert PipelineStatus.READY == "ready"


class TestDeletePrecanned:
    """Tests for delete_precanned() across stores."""

    @pytest.mark.parametrize(
        "store,owner_id",
        [
            (ReportStore, VERSION_ID),
            (MarketingAssetStore, BOOK_ID),
            (CoverStore, BOOK_ID),
            (LandingPageStore, BOOK_ID),
        ],
    )
    async def test_uses_tag_pattern_and_parses_count(self, store, owner_id):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="DELETE 3")

        deleted = await store.delete_precanned(owner_id, "wool", conn=conn)

        assert deleted == 3
        args = conn.execute.call_args[0]
        assert "DELETE FROM" in args[0]
        assert args[1] == owner_id
        assert args[2] == '%"precannedKey":"wool"%'

    async def test_zero_rows(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="DELETE 0")

        assert await CoverStore.delete_precanned(BOOK_ID, "wool", conn=conn) == 0

    async def test_error_wrapped(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(StorageError, match="Failed to delete precanned covers"):
            await CoverStore.delete_precanned(BOOK_ID, "wool", conn=conn)

    @patch("precanned_storage.connection.get_connection_pool", new_callable=AsyncMock)
    async def test_borrows_pool_without_connection(self, mock_get_pool):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="DELETE 1")
        mock_get_pool.return_value = _make_mock_pool(conn)

        assert await MarketingAssetStore.delete_precanned(BOOK_ID, "wool") == 1
        mock_get_pool.assert_awaited_once()


class TestCreate:
    """Tests for create() across stores."""

    async def test_report_create(self):
        conn = AsyncMock()

        report_id = await ReportStore.create(
            book_version_id=VERSION_ID,
            status=ReportStatus.PREVIEW,
            html_content="<html></html>",
            admin_notes='{"precannedKey":"wool"}',
            analyzed_by="system@precanned.local",
            conn=conn,
        )

        assert isinstance(report_id, UUID)
        args = conn.execute.call_args[0]
        assert "INSERT INTO reports" in args[0]
        assert args[1] == report_id
        assert args[2] == VERSION_ID
        assert args[3] == "preview"
        assert args[8] == "system@precanned.local"

    async def test_marketing_create(self):
        conn = AsyncMock()

        asset_id = await MarketingAssetStore.create(
            book_id=BOOK_ID,
            asset_type="video",
            title="Clip",
            description="",
            file_url="/api/uploads/precanned/wool/videos/clip.mp4",
            thumbnail_url=None,
            metadata="{}",
            conn=conn,
        )

        assert isinstance(asset_id, UUID)
        args = conn.execute.call_args[0]
        assert args[3] == "video"
        assert args[9] == "completed"

    async def test_cover_create_primary(self):
        conn = AsyncMock()

        await CoverStore.create(
            book_id=BOOK_ID,
            cover_type="upload",
            title="Cover",
            image_url="/api/uploads/precanned/uploads/wool_cover.jpg",
            thumbnail_url="/api/uploads/precanned/uploads/wool_cover.jpg",
            metadata="{}",
            is_primary=True,
            conn=conn,
        )

        args = conn.execute.call_args[0]
        assert "INSERT INTO book_covers" in args[0]
        assert args[8] is True

    async def test_landing_create(self):
        conn = AsyncMock()

        await LandingPageStore.create(
            book_id=BOOK_ID,
            slug="wool",
            title="Wool",
            headline="h",
            subheadline="s",
            description="d",
            html_content="<html></html>",
            metadata="{}",
            conn=conn,
        )

        args = conn.execute.call_args[0]
        assert "INSERT INTO landing_pages" in args[0]
        assert args[3] == "wool"

    async def test_create_error_wrapped(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(side_effect=RuntimeError("unique violation"))

        with pytest.raises(StorageError, match="Failed to create landing page"):
            await LandingPageStore.create(
                book_id=BOOK_ID,
                slug="wool",
                title="Wool",
                headline="",
                subheadline="",
                description="",
                html_content="",
                metadata="{}",
                conn=conn,
            )


class TestSlugExists:
    """Tests for LandingPageStore.slug_exists()."""

    async def test_found(self):
        conn = AsyncMock()
        conn.fetchrow = AsyncMock(return_value={"id": "x"})

        assert await LandingPageStore.slug_exists("wool", conn=conn) is True

    async def test_not_found(self):
        conn = AsyncMock()
        conn.fetchrow = AsyncMock(return_value=None)

        assert await LandingPageStore.slug_exists("wool", conn=conn) is False


class TestSetPipelineStatus:
    """Tests for BookStore.set_pipeline_status()."""

    async def test_updates(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="UPDATE 1")

        await BookStore.set_pipeline_status(BOOK_ID, PipelineStatus.READY, conn=conn)

        args = conn.execute.call_args[0]
        assert args[1] == "ready"
        assert args[3] == BOOK_ID

    async def test_missing_book_raises(self):
        conn = AsyncMock()
        conn.execute = AsyncMock(return_value="UPDATE 0")

        with pytest.raises(StorageError, match="Book not found"):
            await BookStore.set_pipeline_status(BOOK_ID, PipelineStatus.READY, conn=conn)
