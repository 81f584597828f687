"""Pydantic models for the precanned content engine.

Catalog models mirror the manifest document. Manifest keys are camelCase
(``uploadFileNames``, ``coverImageFileName``, ...); the Python attributes are
snake_case and either form is accepted on input.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _ManifestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class LandingPageSpec(_ManifestModel):
    """Landing page source file plus the copy shown around it."""

    file: str
    slug: Optional[str] = None
    title: Optional[str] = None
    headline: Optional[str] = None
    subheadline: Optional[str] = None
    description: Optional[str] = None


class VideoSpec(_ManifestModel):
    """Marketing clip with an optional poster image."""

    file: str
    title: Optional[str] = None
    description: Optional[str] = None
    poster: Optional[str] = None


class CoverSpec(_ManifestModel):
    """Pre-rendered cover image."""

    file: str
    title: Optional[str] = None
    cover_type: Optional[str] = Field(default=None, alias="coverType")
    is_primary: bool = Field(default=False, alias="isPrimary")


class CatalogEntry(_ManifestModel):
    """One precanned package: all companion content for a known work.

    Read-only after load. All asset references are paths relative to the
    source asset tree.
    """

    key: str = Field(min_length=1)
    title: str
    alias_filenames: list[str] = Field(default_factory=list, alias="uploadFileNames")
    cover_image_filename_override: Optional[str] = Field(
        default=None, alias="coverImageFileName"
    )
    report_ref: Optional[str] = Field(default=None, alias="report")
    preview_ref: Optional[str] = Field(default=None, alias="preview")
    landing_page: Optional[LandingPageSpec] = Field(default=None, alias="landingPage")
    videos: list[VideoSpec] = Field(default_factory=list)
    covers: list[CoverSpec] = Field(default_factory=list)
    marketing_html_ref: Optional[str] = Field(default=None, alias="marketingHtml")
    covers_html_ref: Optional[str] = Field(default=None, alias="coversHtml")


class Catalog(_ManifestModel):
    """Ordered list of packages. Order is significant for resolution."""

    books: list[CatalogEntry] = Field(default_factory=list)


class MaterializedAsset(BaseModel):
    """A source asset copied into the servable tree.

    ``destination_path`` depends only on the destination segments, so
    repeated imports of the same source resolve to the same URLs.
    """

    model_config = ConfigDict(frozen=True)

    source_path: Path
    destination_path: Path
    public_url: str
    api_url: str


class ImportFeatureFlags(BaseModel):
    """Which content categories an import run should (re)create."""

    reports: bool = True
    marketing: bool = True
    covers: bool = True
    landing_page: bool = True


class ImportResult(BaseModel):
    """Summary of one import run. Not persisted."""

    package_key: str
    reports_linked: int = 0
    marketing_assets_linked: int = 0
    covers_linked: int = 0
    landing_page_linked: bool = False
    primary_cover_image_url: Optional[str] = None


class PrecannedTag(BaseModel):
    """Marker serialized into a row's free-text metadata column.

    The only link between a stored row and the package that produced it;
    category-specific values travel in ``details``.
    """

    precanned_key: str
    variant: Optional[str] = None
    upload_file_names: list[str] = Field(default_factory=list)
    source_path: Optional[str] = None
    details: dict = Field(default_factory=dict)
