"""Asset materializer.

Copies package assets from the source tree into the servable tree and hands
back the URLs they are served under. Destination paths depend only on the
destination segments, so re-importing a package yields the same URLs.
"""

import asyncio
import re
import shutil
from pathlib import Path, PurePosixPath
from typing import Optional, Sequence
from urllib.parse import quote

from precanned_common import AssetError, AssetNotFoundError, Settings, get_logger, get_settings
from precanned_contracts import MaterializedAsset

logger = get_logger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim dashes."""
    return _SLUG_RE.sub("-", value.lower()).strip("-")


def asset_filename(
    package_key: str,
    source_ref: str,
    fallback_stem: str,
    fallback_ext: str,
) -> str:
    """Deterministic destination file name: ``<key>-<stem><ext>``.

    Example:
        >>> asset_filename("beach-read", "Beach Read /Video 1.mp4", "clip-1", ".mp4")
        'beach-read-video-1.mp4'
    """
    source = PurePosixPath(source_ref.replace("\\", "/"))
    stem = slugify(source.stem) or slugify(fallback_stem)
    ext = source.suffix or fallback_ext
    return f"{slugify(package_key)}-{stem}{ext}"


def _copy(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)


class AssetMaterializer:
    """Copy-once materialization of source assets into the servable tree.

    The copy-once guard is per process: a fresh process copies again.
    Concurrent callers for the same destination share one copy through a
    per-destination lock.
    """

    def __init__(
        self,
        source_root: Path,
        public_root: Path,
        public_url_prefix: str = "/uploads/precanned",
        api_url_prefix: str = "/api/uploads/precanned",
    ):
        self.source_root = Path(source_root)
        self.public_root = Path(public_root)
        self.public_url_prefix = public_url_prefix.rstrip("/")
        self.api_url_prefix = api_url_prefix.rstrip("/")
        self._copied: set[Path] = set()
        self._locks: dict[Path, asyncio.Lock] = {}

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AssetMaterializer":
        settings = settings or get_settings()
        return cls(
            settings.precanned_root,
            settings.public_root,
            public_url_prefix=settings.public_url_prefix,
            api_url_prefix=settings.api_url_prefix,
        )

    def urls_for(self, dest_segments: Sequence[str]) -> tuple[str, str]:
        """(public_url, api_url) for a destination."""
        path = "/".join(quote(segment.replace("\\", "/")) for segment in dest_segments)
        return f"{self.public_url_prefix}/{path}", f"{self.api_url_prefix}/{path}"

    async def materialize(self, source_ref: str, dest_segments: Sequence[str]) -> MaterializedAsset:
        """Copy ``source_ref`` to ``public_root/<dest_segments>`` once per process.

        Args:
            source_ref: Path relative to the source tree
            dest_segments: Destination path segments, last one is the file name

        Raises:
            ValueError: If dest_segments is empty
            AssetNotFoundError: If the source file does not exist
            AssetError: If the copy fails
        """
        if not dest_segments:
            raise ValueError("dest_segments must be a non-empty sequence")

        source_path = self.source_root / source_ref
        destination_path = self.public_root.joinpath(*dest_segments)
        public_url, api_url = self.urls_for(dest_segments)

        lock = self._locks.setdefault(destination_path, asyncio.Lock())
        async with lock:
            if destination_path not in self._copied:
                if not source_path.is_file():
                    raise AssetNotFoundError(f"Source asset not found: {source_path}")
                try:
                    await asyncio.to_thread(_copy, source_path, destination_path)
                except OSError as e:
                    logger.error(
                        "asset_copy_failed",
                        source=str(source_path),
                        destination=str(destination_path),
                        error=str(e),
                    )
                    raise AssetError(f"Failed to copy {source_path}: {e}") from e
                self._copied.add(destination_path)
                logger.debug("asset_materialized", source=str(source_path), url=public_url)

        return MaterializedAsset(
            source_path=source_path,
            destination_path=destination_path,
            public_url=public_url,
            api_url=api_url,
        )

    def locate(self, segments: Sequence[str]) -> Optional[Path]:
        """Map served path segments back to a file on disk.

        Looks in the servable tree first, then the source tree. Segments that
        would escape either root are refused.
        """
        if not segments:
            return None

        for root in (self.public_root, self.source_root):
            base = root.resolve()
            candidate = base.joinpath(*segments).resolve()
            if candidate != base and base not in candidate.parents:
                logger.warning("asset_path_rejected", segments=list(segments))
                return None
            if candidate.is_file():
                return candidate
        return None

    def forget(self) -> None:
        """Clear the copy-once record (tests and explicit re-sync)."""
        self._copied.clear()
        self._locks.clear()
