"""Custom error types for the precanned content engine.

All errors follow the "fail fast" principle with explicit messages.
"""


class PrecannedError(Exception):
    """Base exception for all precanned content errors."""

    pass


class CatalogError(PrecannedError):
    """Manifest is missing, unreadable, or does not validate.

    There is no fallback catalog, so this always aborts an import.
    """

    pass


class AssetError(PrecannedError):
    """Error while copying, inlining, or locating a package asset."""

    pass


class AssetNotFoundError(AssetError):
    """A source asset referenced by the manifest does not exist."""

    pass


class StorageError(PrecannedError):
    """Error during database operations."""

    pass


class SlugCollisionError(StorageError):
    """No free landing page slug was found within the attempt limit."""

    pass
