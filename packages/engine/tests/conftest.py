"""Shared fixtures for engine tests.

Builds a small package tree on disk and an in-memory stand-in for the
storage collaborator, so import runs can be checked without PostgreSQL.
"""

import copy
import json
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

import pytest

from precanned_contracts import Catalog
from precanned_engine import AssetMaterializer, CatalogService, ContentStores, PrecannedImporter
from precanned_storage import parse_tag

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16

MANIFEST = {
    "books": [
        {
            "key": "wool",
            "title": "Wool",
            "uploadFileNames": ["Wool by Hugh Howey.pdf", "Wool.pdf"],
            "coverImageFileName": "wool_cover.jpg",
            "report": "Wool/Report/wool-report.html",
            "preview": "Wool/Preview/wool-preview.html",
            "landingPage": {
                "file": "Wool/Landing page/index.html",
                "slug": "wool",
                "title": "Wool",
                "headline": "Welcome to the Silo",
            },
            "videos": [
                {
                    "file": "Wool/Marketing/Clip One.mp4",
                    "title": "Teaser",
                    "poster": "Wool/Landing page/Wool UI.png",
                }
            ],
            "covers": [
                {"file": "Wool/Covers/front.png", "coverType": "hardcover", "isPrimary": True},
                {"file": "Wool/Covers/back.png", "coverType": "paperback"},
            ],
            "marketingHtml": "Wool/Marketing/toolkit.html",
            "coversHtml": "Wool/Covers/gallery.html",
        },
        {
            "key": "beach-read",
            "title": "Beach Read",
            "uploadFileNames": ["Beach Read.pdf"],
            "report": "Beach Read/Report/beach-report.html",
            "covers": [{"file": "Beach Read/Covers/cover.png", "isPrimary": True}],
        },
    ]
}


def _write(path: Path, content) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def content_root(tmp_path) -> Path:
    """Source asset tree with a manifest, two packages, and an uploads folder."""
    root = tmp_path / "precannedcontent"
    _write(root / "manifest.json", json.dumps(MANIFEST))

    _write(root / "uploads" / "wool_cover.jpg", JPEG_BYTES)
    _write(root / "uploads" / "beach_read.png", PNG_BYTES)
    _write(root / "uploads" / "notes.txt", "not an image")

    _write(
        root / "Wool" / "Report" / "wool-report.html",
        '<html><body><img src="cover.png" alt="cover"><p>Full report</p></body></html>',
    )
    _write(root / "Wool" / "Report" / "cover.png", PNG_BYTES)
    _write(
        root / "Wool" / "Preview" / "wool-preview.html",
        "<html><body><p>Preview</p></body></html>",
    )

    _write(root / "Wool" / "Marketing" / "Clip One.mp4", b"\x00\x00\x00\x18ftypmp42")
    _write(
        root / "Wool" / "Marketing" / "toolkit.html",
        '<video src="Clip One.mp4" poster="Landing page/Wool UI.png"></video>',
    )
    _write(root / "Wool" / "Landing page" / "Wool UI.png", PNG_BYTES)
    _write(
        root / "Wool" / "Landing page" / "index.html",
        '<section><img src="Wool UI.png"><img src="../Covers/front.png"></section>',
    )

    _write(root / "Wool" / "Covers" / "front.png", PNG_BYTES)
    _write(root / "Wool" / "Covers" / "back.png", PNG_BYTES)
    _write(
        root / "Wool" / "Covers" / "gallery.html",
        '<div><img data-src="assets/front.png"><img data-src="back.png"></div>',
    )

    _write(root / "Beach Read" / "Report" / "beach-report.html", "<p>Beach</p>")
    _write(root / "Beach Read" / "Covers" / "cover.png", PNG_BYTES)
    return root


@pytest.fixture
def public_root(tmp_path) -> Path:
    return tmp_path / "public" / "uploads" / "precanned"


@pytest.fixture
def catalog(content_root) -> CatalogService:
    return CatalogService(content_root)


@pytest.fixture
def materializer(content_root, public_root) -> AssetMaterializer:
    return AssetMaterializer(content_root, public_root)


class FakeTable:
    """In-memory rows for one content table, keyed by owner id."""

    def __init__(self, metadata_field: str = "metadata"):
        self.rows: list[dict] = []
        self.metadata_field = metadata_field

    def _delete(self, owner_id: str, package_key: str) -> int:
        kept, deleted = [], 0
        for row in self.rows:
            tag = parse_tag(row[self.metadata_field])
            if row["owner_id"] == owner_id and tag and tag.precanned_key == package_key:
                deleted += 1
            else:
                kept.append(row)
        self.rows = kept
        return deleted

    def _insert(self, **row) -> str:
        row["id"] = str(uuid4())
        self.rows.append(row)
        return row["id"]

    def tags(self) -> list:
        return [parse_tag(row[self.metadata_field]) for row in self.rows]


class FakeReportStore(FakeTable):
    def __init__(self):
        super().__init__("admin_notes")

    async def delete_precanned(self, book_version_id, package_key, conn=None):
        return self._delete(book_version_id, package_key)

    async def create(self, book_version_id, status, html_content, admin_notes, analyzed_by, conn=None):
        return self._insert(
            owner_id=book_version_id,
            status=status,
            html_content=html_content,
            admin_notes=admin_notes,
            analyzed_by=analyzed_by,
        )


class FakeMarketingStore(FakeTable):
    async def delete_precanned(self, book_id, package_key, conn=None):
        return self._delete(book_id, package_key)

    async def create(
        self,
        book_id,
        asset_type,
        title,
        description,
        file_url,
        thumbnail_url,
        metadata,
        status="completed",
        conn=None,
    ):
        return self._insert(
            owner_id=book_id,
            asset_type=asset_type,
            title=title,
            description=description,
            file_url=file_url,
            thumbnail_url=thumbnail_url,
            metadata=metadata,
            status=status,
        )


class FakeCoverStore(FakeTable):
    async def delete_precanned(self, book_id, package_key, conn=None):
        return self._delete(book_id, package_key)

    async def create(
        self,
        book_id,
        cover_type,
        title,
        image_url,
        thumbnail_url,
        metadata,
        is_primary=False,
        status="completed",
        conn=None,
    ):
        return self._insert(
            owner_id=book_id,
            cover_type=cover_type,
            title=title,
            image_url=image_url,
            thumbnail_url=thumbnail_url,
            metadata=metadata,
            is_primary=is_primary,
            status=status,
        )


class FakeLandingPageStore(FakeTable):
    def __init__(self):
        super().__init__()
        self.reserved_slugs: set[str] = set()
        self.probes: list[str] = []

    async def delete_precanned(self, book_id, package_key, conn=None):
        return self._delete(book_id, package_key)

    async def slug_exists(self, slug, conn=None):
        self.probes.append(slug)
        return slug in self.reserved_slugs or any(row["slug"] == slug for row in self.rows)

    async def create(
        self,
        book_id,
        slug,
        title,
        headline,
        subheadline,
        description,
        html_content,
        metadata,
        conn=None,
    ):
        return self._insert(
            owner_id=book_id,
            slug=slug,
            title=title,
            headline=headline,
            subheadline=subheadline,
            description=description,
            html_content=html_content,
            metadata=metadata,
        )


class FakeBookStore:
    def __init__(self):
        self.statuses: dict[str, str] = {}

    async def set_pipeline_status(self, book_id, status, conn=None):
        self.statuses[book_id] = status


class FakeStorage:
    """All fake stores plus a unit of work that restores rows on error."""

    def __init__(self):
        self.reports = FakeReportStore()
        self.marketing = FakeMarketingStore()
        self.covers = FakeCoverStore()
        self.landing_pages = FakeLandingPageStore()
        self.books = FakeBookStore()
        self.commits = 0
        self.rollbacks = 0

    def _tables(self):
        return (self.reports, self.marketing, self.covers, self.landing_pages)

    @asynccontextmanager
    async def unit_of_work(self):
        snapshot = [copy.deepcopy(table.rows) for table in self._tables()]
        statuses = dict(self.books.statuses)
        try:
            yield object()
        except BaseException:
            for table, rows in zip(self._tables(), snapshot):
                table.rows = rows
            self.books.statuses = statuses
            self.rollbacks += 1
            raise
        self.commits += 1

    def content_stores(self) -> ContentStores:
        return ContentStores(
            reports=self.reports,
            marketing=self.marketing,
            covers=self.covers,
            landing_pages=self.landing_pages,
            books=self.books,
            unit_of_work=self.unit_of_work,
        )


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def importer(catalog, materializer, storage) -> PrecannedImporter:
    return PrecannedImporter(catalog, materializer, stores=storage.content_stores())


@pytest.fixture
def manifest_catalog() -> Catalog:
    return Catalog.model_validate(MANIFEST)
