"""Catalog manifest service.

The manifest (``{books: [...]}``, JSON or YAML) and the listing of standalone
cover images are read lazily on first use and then served from memory.
``reload()`` is the only refresh path short of a process restart.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from precanned_common import CatalogError, Settings, get_logger, get_settings
from precanned_contracts import Catalog, CatalogEntry

logger = get_logger(__name__)

UPLOAD_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


def _read_manifest(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise CatalogError(f"Manifest not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (ValueError, yaml.YAMLError) as e:
        raise CatalogError(f"Manifest is not parseable: {path}: {e}") from e

    if not isinstance(data, dict):
        raise CatalogError(f"Manifest must be a mapping with a 'books' list: {path}")
    return data


def _list_images(directory: Path) -> list[str]:
    if not directory.is_dir():
        return []
    return sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and entry.suffix.lower() in UPLOAD_IMAGE_EXTENSIONS
    )


class CatalogService:
    """Loads and memoizes the package catalog and the uploads image listing.

    Example:
        >>> catalog = CatalogService(Path("precannedcontent"))
        >>> entries = (await catalog.load()).books
        >>> wool = await catalog.find_by_key("wool")
    """

    def __init__(
        self,
        root: Path,
        manifest_filename: str = "manifest.json",
        uploads_dirname: str = "uploads",
    ):
        self.root = Path(root)
        self.manifest_path = self.root / manifest_filename
        self.uploads_dir = self.root / uploads_dirname
        self._catalog: Optional[Catalog] = None
        self._upload_images: Optional[list[str]] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CatalogService":
        settings = settings or get_settings()
        return cls(
            settings.precanned_root,
            manifest_filename=settings.manifest_filename,
            uploads_dirname=settings.uploads_dirname,
        )

    async def load(self) -> Catalog:
        """Return the catalog, reading the manifest on first call.

        Raises:
            CatalogError: If the manifest is missing, unparseable, or invalid
        """
        if self._catalog is not None:
            return self._catalog

        async with self._lock:
            if self._catalog is not None:
                return self._catalog

            data = await asyncio.to_thread(_read_manifest, self.manifest_path)
            try:
                catalog = Catalog.model_validate(data)
            except ValidationError as e:
                logger.error("manifest_invalid", path=str(self.manifest_path), error=str(e))
                raise CatalogError(f"Manifest failed validation: {self.manifest_path}") from e

            self._catalog = catalog
            logger.info(
                "manifest_loaded",
                path=str(self.manifest_path),
                packages=len(catalog.books),
            )
            return catalog

    async def entries(self) -> list[CatalogEntry]:
        return list((await self.load()).books)

    async def find_by_key(self, key: Optional[str]) -> Optional[CatalogEntry]:
        """Exact key lookup. Returns None for an empty or unknown key."""
        if not key:
            return None
        for entry in await self.entries():
            if entry.key == key:
                return entry
        return None

    async def list_upload_images(self) -> list[str]:
        """Sorted image file names in the uploads directory ([] if absent)."""
        if self._upload_images is None:
            self._upload_images = await asyncio.to_thread(_list_images, self.uploads_dir)
            logger.debug(
                "upload_images_listed",
                directory=str(self.uploads_dir),
                count=len(self._upload_images),
            )
        return list(self._upload_images)

    def reload(self) -> None:
        """Drop the cached catalog and image listing."""
        self._catalog = None
        self._upload_images = None
        logger.info("catalog_cache_cleared", path=str(self.manifest_path))
