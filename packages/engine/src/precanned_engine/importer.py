"""Precanned content import orchestrator.

Resolves a catalog package for a submitted manuscript and (re)creates the
four content categories for it, in order: reports, marketing, covers,
landing page. Every category first deletes rows this package produced for
the same book, so repeated imports replace rather than accumulate.

The whole run shares one connection and one transaction: a storage failure
rolls back every category of that run. Copied files stay in place.

Outcomes:
- ``ImportResult``: package resolved and imported
- ``None``: no package matched (a normal outcome; caller falls back)
- exception: manifest or storage failure
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Optional

from precanned_common import (
    AssetError,
    Settings,
    SlugCollisionError,
    get_logger,
    get_settings,
)
from precanned_contracts import (
    CatalogEntry,
    ImportFeatureFlags,
    ImportResult,
    MaterializedAsset,
    PrecannedTag,
)
from precanned_storage import (
    BookStore,
    CoverStore,
    LandingPageStore,
    MarketingAssetStore,
    PipelineStatus,
    ReportStatus,
    ReportStore,
    serialize_tag,
    unit_of_work,
)

from precanned_engine.inliner import extract_cover_image_data, inline_images
from precanned_engine.manifest import CatalogService
from precanned_engine.matching import (
    best_filename_match,
    cover_override_for,
    first_matching_entry,
)
from precanned_engine.materializer import AssetMaterializer, asset_filename, slugify
from precanned_engine.rewriter import rewrite_asset_references

logger = get_logger(__name__)

MAX_SLUG_LENGTH = 120


@dataclass
class ContentStores:
    """The storage collaborator: one store per logical table plus the unit of work."""

    reports: Any = ReportStore
    marketing: Any = MarketingAssetStore
    covers: Any = CoverStore
    landing_pages: Any = LandingPageStore
    books: Any = BookStore
    unit_of_work: Callable[[], Any] = unit_of_work


def _basename(ref: str) -> str:
    return PurePosixPath(ref.replace("\\", "/")).name


def _strip_first_folder(ref: str) -> str:
    parts = ref.replace("\\", "/").split("/", 1)
    return parts[1] if len(parts) == 2 else ref


def _suffixed_slug(base: str, short_id: str, attempt: int) -> str:
    """``<base>-<id8>`` then ``<base>-<id8>-<attempt>``, trimming the base so the suffix fits."""
    parts = [short_id] if short_id else []
    if attempt > 1 or not parts:
        parts.append(str(attempt))
    suffix = "-".join(parts)
    head = base[: MAX_SLUG_LENGTH - len(suffix) - 1].rstrip("-")
    return f"{head}-{suffix}" if head else suffix


class PrecannedImporter:
    """Provision precanned companion content onto a user's book.

    Example:
        >>> importer = PrecannedImporter.from_settings()
        >>> result = await importer.import_for_book(
        ...     book_id="b1",
        ...     book_version_id="v1",
        ...     file_name="Beach Read - Final.pdf",
        ... )
        >>> result.package_key if result else None
        'beach-read'
    """

    def __init__(
        self,
        catalog: CatalogService,
        materializer: AssetMaterializer,
        stores: Optional[ContentStores] = None,
        max_slug_attempts: int = 20,
        analyzed_by: str = "system@precanned.local",
    ):
        self.catalog = catalog
        self.materializer = materializer
        self.stores = stores or ContentStores()
        self.max_slug_attempts = max_slug_attempts
        self.analyzed_by = analyzed_by

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PrecannedImporter":
        settings = settings or get_settings()
        return cls(
            CatalogService.from_settings(settings),
            AssetMaterializer.from_settings(settings),
            max_slug_attempts=settings.max_slug_attempts,
            analyzed_by=settings.analyzed_by,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve_package_by_filename(self, file_name: Optional[str]) -> Optional[CatalogEntry]:
        """First catalog entry, in manifest order, whose names match ``file_name``."""
        if not file_name:
            return None
        entry = first_matching_entry(await self.catalog.entries(), file_name)
        if entry is None:
            logger.info("package_not_found", file_name=file_name)
        else:
            logger.info("package_resolved", package_key=entry.key, file_name=file_name)
        return entry

    async def resolve_package(
        self,
        package_key: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Optional[CatalogEntry]:
        """Explicit key lookup, falling back to filename resolution."""
        entry = await self.catalog.find_by_key(package_key)
        if entry is not None:
            return entry
        return await self.resolve_package_by_filename(file_name)

    async def resolve_standalone_cover(self, file_name: Optional[str]) -> Optional[MaterializedAsset]:
        """Materialize the uploads image that best fits ``file_name``.

        A catalog entry's explicit cover override wins when one of its
        aliases matches; otherwise the uploads listing is scored.
        """
        if not file_name:
            return None

        images = await self.catalog.list_upload_images()
        image_name = cover_override_for(await self.catalog.entries(), file_name)
        if image_name is not None and image_name not in images:
            logger.warning("cover_override_missing", file_name=file_name, image=image_name)
            image_name = None
        if image_name is None:
            image_name = best_filename_match(images, file_name)
        if image_name is None:
            return None

        uploads_dirname = self.catalog.uploads_dir.name
        try:
            asset = await self.materializer.materialize(
                f"{uploads_dirname}/{image_name}", [uploads_dirname, image_name]
            )
        except AssetError as e:
            logger.warning("standalone_cover_skipped", image=image_name, error=str(e))
            return None

        logger.info("standalone_cover_resolved", file_name=file_name, image=image_name)
        return asset

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def import_for_book(
        self,
        book_id: str,
        book_version_id: Optional[str] = None,
        file_name: Optional[str] = None,
        package_key: Optional[str] = None,
        features: Optional[ImportFeatureFlags] = None,
    ) -> Optional[ImportResult]:
        """Import a package's content for a book.

        Args:
            book_id: Owning book
            book_version_id: Version the reports attach to (reports skipped without it)
            file_name: Submitted manuscript file name
            package_key: Explicit catalog key (takes precedence over file_name)
            features: Categories to import (default: all)

        Returns:
            ImportResult, or None when no package resolves

        Raises:
            CatalogError: If the manifest cannot be loaded
            StorageError: If any database write fails (the run is rolled back)
        """
        entry = await self.resolve_package(package_key, file_name)
        if entry is None:
            return None

        flags = features or ImportFeatureFlags()
        result = ImportResult(package_key=entry.key)
        replacements: dict[str, str] = {}

        logger.info(
            "precanned_import_started",
            book_id=book_id,
            package_key=entry.key,
            features=flags.model_dump(),
        )

        async with self.stores.unit_of_work() as conn:
            if flags.reports and book_version_id:
                result.reports_linked = await self._import_reports(
                    conn, book_id, book_version_id, entry
                )

            if flags.marketing:
                result.marketing_assets_linked = await self._import_marketing(
                    conn, book_id, entry, replacements
                )

            if flags.covers:
                created, primary_url = await self._import_covers(
                    conn, book_id, entry, file_name, replacements
                )
                result.covers_linked = created
                result.primary_cover_image_url = primary_url

            if flags.landing_page:
                result.landing_page_linked = await self._import_landing_page(
                    conn, book_id, entry, replacements
                )

        logger.info("precanned_import_completed", book_id=book_id, **result.model_dump())
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _tag(
        self,
        entry: CatalogEntry,
        variant: Optional[str],
        source_path: Optional[str],
        **details: Any,
    ) -> str:
        return serialize_tag(
            PrecannedTag(
                precanned_key=entry.key,
                variant=variant,
                upload_file_names=list(entry.alias_filenames),
                source_path=source_path,
                details=details,
            )
        )

    def _read_html_sync(self, ref: str) -> Optional[str]:
        path: Path = self.materializer.source_root / ref
        if not path.is_file():
            logger.warning("html_source_missing", path=str(path))
            return None
        # Undecodable bytes become U+FFFD
        return inline_images(path, path.read_text(encoding="utf-8", errors="replace"))

    async def _read_html(self, ref: Optional[str]) -> Optional[str]:
        """Read and inline an HTML source; None when absent."""
        if not ref:
            return None
        return await asyncio.to_thread(self._read_html_sync, ref)

    async def _materialize_optional(
        self, source_ref: str, dest_segments: list[str]
    ) -> Optional[MaterializedAsset]:
        try:
            return await self.materializer.materialize(source_ref, dest_segments)
        except AssetError as e:
            logger.warning("asset_skipped", source=source_ref, error=str(e))
            return None

    def _rewrite(self, html: str, replacements: dict[str, str]) -> str:
        return rewrite_asset_references(
            html, replacements, api_prefix=self.materializer.api_url_prefix
        )

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def _import_reports(
        self, conn: Any, book_id: str, book_version_id: str, entry: CatalogEntry
    ) -> int:
        if not entry.report_ref or not entry.preview_ref:
            logger.info("reports_skipped", package_key=entry.key, reason="missing_reference")
            return 0

        preview_html, report_html = await asyncio.gather(
            self._read_html(entry.preview_ref),
            self._read_html(entry.report_ref),
        )
        if preview_html is None or report_html is None:
            logger.warning("reports_skipped", package_key=entry.key, reason="missing_source")
            return 0

        await self.stores.reports.delete_precanned(book_version_id, entry.key, conn=conn)

        documents = (
            (ReportStatus.PREVIEW, "preview", entry.preview_ref, preview_html),
            (ReportStatus.COMPLETED, "report", entry.report_ref, report_html),
        )
        for status, variant, ref, html in documents:
            await self.stores.reports.create(
                book_version_id,
                status,
                html,
                self._tag(
                    entry,
                    variant,
                    ref,
                    seededFileName=_basename(ref),
                    coverImageData=extract_cover_image_data(html),
                ),
                self.analyzed_by,
                conn=conn,
            )

        await self.stores.books.set_pipeline_status(book_id, PipelineStatus.READY, conn=conn)
        return len(documents)

    async def _import_marketing(
        self, conn: Any, book_id: str, entry: CatalogEntry, replacements: dict[str, str]
    ) -> int:
        await self.stores.marketing.delete_precanned(book_id, entry.key, conn=conn)
        created = 0

        for index, video in enumerate(entry.videos, start=1):
            if not video.file:
                continue

            filename = asset_filename(entry.key, video.file, f"clip-{index}", ".mp4")
            asset = await self._materialize_optional(video.file, [entry.key, "videos", filename])
            if asset is None:
                continue
            replacements[video.file] = asset.api_url
            replacements[_basename(video.file)] = asset.api_url

            thumbnail_url: Optional[str] = None
            if video.poster:
                poster_name = asset_filename(
                    entry.key, video.poster, f"clip-{index}-poster", ".png"
                )
                poster = await self._materialize_optional(
                    video.poster, [entry.key, "videos", poster_name]
                )
                if poster is not None:
                    thumbnail_url = poster.api_url
                    replacements[video.poster] = poster.api_url
                    replacements[_basename(video.poster)] = poster.api_url
                    replacements[_strip_first_folder(video.poster)] = poster.api_url

            await self.stores.marketing.create(
                book_id,
                "video",
                video.title or f"{entry.title} Clip {index}",
                video.description or "",
                asset.api_url,
                thumbnail_url,
                self._tag(entry, "video", video.file, posterFile=video.poster),
                conn=conn,
            )
            created += 1

        html = await self._read_html(entry.marketing_html_ref)
        if html is not None:
            html = self._rewrite(html, replacements)
            await self.stores.marketing.create(
                book_id,
                "html",
                f"{entry.title} Marketing Toolkit",
                "Interactive marketing toolkit preview",
                "",
                None,
                self._tag(entry, "html", entry.marketing_html_ref, htmlContent=html),
                conn=conn,
            )
            created += 1

        return created

    async def _import_covers(
        self,
        conn: Any,
        book_id: str,
        entry: CatalogEntry,
        file_name: Optional[str],
        replacements: dict[str, str],
    ) -> tuple[int, Optional[str]]:
        await self.stores.covers.delete_precanned(book_id, entry.key, conn=conn)
        created = 0
        primary_url: Optional[str] = None

        upload_cover = await self.resolve_standalone_cover(file_name)
        if upload_cover is not None:
            source_ref = f"{self.catalog.uploads_dir.name}/{upload_cover.source_path.name}"
            await self.stores.covers.create(
                book_id,
                "ebook",
                f"{entry.title} Cover",
                upload_cover.api_url,
                upload_cover.api_url,
                self._tag(entry, "upload", source_ref, order=0),
                is_primary=True,
                conn=conn,
            )
            primary_url = upload_cover.api_url
            created += 1

        for order, cover in enumerate(entry.covers, start=1):
            if not cover.file:
                continue

            filename = asset_filename(entry.key, cover.file, f"cover-{order}", ".png")
            asset = await self._materialize_optional(cover.file, [entry.key, "covers", filename])
            if asset is None:
                continue
            replacements[cover.file] = asset.api_url
            replacements[_basename(cover.file)] = asset.api_url

            is_primary = cover.is_primary and primary_url is None
            await self.stores.covers.create(
                book_id,
                cover.cover_type or "ebook",
                cover.title or f"{entry.title} Cover {order}",
                asset.api_url,
                asset.api_url,
                self._tag(entry, "cover", cover.file, order=order),
                is_primary=is_primary,
                conn=conn,
            )
            if is_primary:
                primary_url = asset.api_url
            created += 1

        html = await self._read_html(entry.covers_html_ref)
        if html is not None:
            html = self._rewrite(html, replacements)
            await self.stores.covers.create(
                book_id,
                "html",
                f"{entry.title} Cover Gallery",
                "",
                None,
                self._tag(entry, "html", entry.covers_html_ref, htmlContent=html),
                is_primary=False,
                conn=conn,
            )
            created += 1

        return created, primary_url

    async def _import_landing_page(
        self, conn: Any, book_id: str, entry: CatalogEntry, replacements: dict[str, str]
    ) -> bool:
        spec = entry.landing_page
        if spec is None or not spec.file:
            return False

        html = await self._read_html(spec.file)
        if html is None:
            return False

        await self.stores.landing_pages.delete_precanned(book_id, entry.key, conn=conn)
        html = self._rewrite(html, replacements)

        base_slug = (
            slugify(spec.slug or "")
            or slugify(spec.title or "")
            or f"{slugify(entry.key)}-landing"
        )
        slug = await self._unique_landing_slug(conn, base_slug, book_id)

        await self.stores.landing_pages.create(
            book_id,
            slug,
            spec.title or entry.title,
            spec.headline or spec.title or entry.title,
            spec.subheadline or spec.description or "",
            spec.description or "",
            html,
            self._tag(entry, "landing", spec.file),
            conn=conn,
        )
        return True

    async def _unique_landing_slug(self, conn: Any, base_slug: str, book_id: str) -> str:
        """First free slug: the base, then ``<base>-<id8>``, ``<base>-<id8>-2``, ...

        Raises:
            SlugCollisionError: After max_slug_attempts probes
        """
        short_id = slugify(str(book_id))[:8].strip("-")
        base = (base_slug or f"landing-{short_id}")[:MAX_SLUG_LENGTH].strip("-")
        candidate = base

        for attempt in range(1, self.max_slug_attempts + 1):
            if not await self.stores.landing_pages.slug_exists(candidate, conn=conn):
                return candidate
            candidate = _suffixed_slug(base, short_id, attempt)

        logger.error("landing_slug_exhausted", base_slug=base, attempts=self.max_slug_attempts)
        raise SlugCollisionError(
            f"No free landing page slug for '{base}' after {self.max_slug_attempts} attempts"
        )
