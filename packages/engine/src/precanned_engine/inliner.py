"""HTML image inlining.

Turns an HTML document into a self-contained one by replacing image
references with base64 ``data:`` URIs. Scanning is regex based and best
effort: references that cannot be resolved are left as they are.
"""

import base64
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from precanned_common import get_logger

logger = get_logger(__name__)

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "svg")

MIME_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}
DEFAULT_MIME_TYPE = "image/jpeg"

_EXT = "|".join(IMAGE_EXTENSIONS)
_REFERENCE_RE = re.compile(
    rf"""(?:src|href)\s*=\s*["']([^"']+\.(?:{_EXT}))["']"""
    rf"""|url\(\s*["']?([^"')]+\.(?:{_EXT}))["']?\s*\)""",
    re.IGNORECASE,
)
_COVER_DATA_RE = re.compile(r"""<img[^>]+src=["'](data:image/[^"']+)["']""", re.IGNORECASE)


def mime_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def to_data_uri(path: Path) -> str:
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type_for(path)};base64,{encoded}"


def find_image_references(html: str) -> list[str]:
    """Distinct image references in document order."""
    refs: list[str] = []
    for match in _REFERENCE_RE.finditer(html):
        ref = match.group(1) or match.group(2)
        if ref and ref not in refs:
            refs.append(ref)
    return refs


def _is_inlinable(ref: str) -> bool:
    lowered = ref.lower()
    return not lowered.startswith(("http://", "https://", "data:"))


def _subdirectories(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(entry for entry in directory.iterdir() if entry.is_dir())


def resolve_image_reference(document_dir: Path, ref: str) -> Optional[Path]:
    """Find the file ``ref`` points at, relative to a document directory.

    Tries the document directory, its parent, each immediate subdirectory of
    the document directory, then each immediate subdirectory of the parent.
    The raw reference is tried first, then its percent-decoded form.
    """
    parent = document_dir.parent
    bases = [document_dir, parent, *_subdirectories(document_dir), *_subdirectories(parent)]

    variants = [ref]
    decoded = unquote(ref)
    if decoded != ref:
        variants.append(decoded)

    for variant in variants:
        for base in bases:
            candidate = base / variant
            if candidate.is_file():
                return candidate
    return None


def _replace_reference(html: str, ref: str, data_uri: str) -> str:
    escaped = re.escape(ref)
    patterns = (
        re.compile(rf"""((?:src|href)\s*=\s*["']){escaped}(["'])""", re.IGNORECASE),
        re.compile(rf"""(url\(\s*["']?){escaped}(["']?\s*\))""", re.IGNORECASE),
    )
    for pattern in patterns:
        html = pattern.sub(lambda m: f"{m.group(1)}{data_uri}{m.group(2)}", html)
    return html


def inline_images(document_path: Path, html: str) -> str:
    """Return ``html`` with every resolvable image reference embedded.

    Each distinct reference is resolved once and substituted everywhere it
    appears as a ``src``/``href`` attribute or CSS ``url(...)``. Absolute
    URLs and existing data URIs are left alone.

    Args:
        document_path: Where the document lives; references resolve from here
        html: Document content

    Returns:
        New document string
    """
    document_dir = Path(document_path).parent
    inlined = html
    embedded = 0

    for ref in find_image_references(html):
        if not _is_inlinable(ref):
            continue

        resolved = resolve_image_reference(document_dir, ref)
        if resolved is None:
            logger.debug("image_reference_unresolved", document=str(document_path), ref=ref)
            continue

        inlined = _replace_reference(inlined, ref, to_data_uri(resolved))
        embedded += 1

    if embedded:
        logger.debug("images_inlined", document=str(document_path), count=embedded)
    return inlined


def extract_cover_image_data(html: Optional[str]) -> Optional[str]:
    """First inlined ``<img>`` data URI in the document, if any."""
    if not html:
        return None
    match = _COVER_DATA_RE.search(html)
    return match.group(1) if match else None
