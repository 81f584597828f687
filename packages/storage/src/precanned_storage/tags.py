"""Precanned tag codec.

Rows produced from a package carry a compact JSON object in their free-text
metadata column. There is no foreign key back to the package, so prior rows
are found by matching the serialized ``"precannedKey":"<key>"`` fragment.
"""

import json
from typing import Any, Optional

from precanned_contracts import PrecannedTag

# Serialization must stay compact: the LIKE pattern relies on no whitespace
# between the key, the colon and the value.
_SEPARATORS = (",", ":")


def serialize_tag(tag: PrecannedTag) -> str:
    """Serialize a tag to the JSON text stored in a metadata column."""
    payload: dict[str, Any] = {
        "precanned": True,
        "precannedKey": tag.precanned_key,
        "variant": tag.variant,
        "uploadFileNames": list(tag.upload_file_names),
        "sourcePath": tag.source_path,
    }
    payload.update(tag.details)
    return json.dumps(payload, separators=_SEPARATORS)


def parse_tag(metadata: Optional[str]) -> Optional[PrecannedTag]:
    """Parse a metadata column back into a tag.

    Returns None for empty, non-JSON, or non-precanned metadata.
    """
    if not metadata:
        return None
    try:
        payload = json.loads(metadata)
    except ValueError:
        return None
    if not isinstance(payload, dict) or not payload.get("precannedKey"):
        return None

    known = {"precanned", "precannedKey", "variant", "uploadFileNames", "sourcePath"}
    return PrecannedTag(
        precanned_key=payload["precannedKey"],
        variant=payload.get("variant"),
        upload_file_names=payload.get("uploadFileNames") or [],
        source_path=payload.get("sourcePath"),
        details={k: v for k, v in payload.items() if k not in known},
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def tag_like_pattern(package_key: str) -> str:
    """SQL LIKE pattern matching metadata written for ``package_key``.

    Backslash is PostgreSQL's default LIKE escape character.
    """
    fragment = json.dumps({"precannedKey": package_key}, separators=_SEPARATORS)[1:-1]
    return f"%{_escape_like(fragment)}%"
