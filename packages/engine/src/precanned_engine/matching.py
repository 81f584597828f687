"""Filename normalization and fuzzy matching.

Two strategies live here and are deliberately kept apart:

- ``first_matching_entry``: catalog resolution. Entries are tried in manifest
  order and the first one with any matching alias wins (first-match).
- ``best_filename_match``: standalone cover search. Every candidate is scored
  and the highest score wins (best-match).

Call sites depend on the difference, so do not fold one into the other.
"""

import re
from pathlib import PurePosixPath
from typing import Iterable, Optional

from precanned_contracts import CatalogEntry

NOISE_TOKENS = ("final", "book", "report", "manuscript", "draft", "version", "copy")

_EXTENSION_RE = re.compile(r"\.[^.]*$")
_NOISE_RE = re.compile(r"\s*(?:" + "|".join(NOISE_TOKENS) + r")\s*")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_ALPHA_RUN_RE = re.compile(r"[a-z]{3,}")

# Score tiers for best_filename_match
SCORE_EXACT = 100
SCORE_CORE_EQUAL = 80
SCORE_CONTAINS = 60
SCORE_CORE_CONTAINS = 40
SCORE_NONE = 0

MIN_SCORED_CORE_LENGTH = 4


def normalize_filename(name: str) -> str:
    """Reduce a filename to a comparable key.

    Lowercase, drop the trailing extension, remove noise tokens wherever they
    occur, then keep only ``[a-z0-9]``. Idempotent.

    Example:
        >>> normalize_filename("The Wool Book FINAL v3.pdf")
        'thewoolv3'
    """
    normalized = _EXTENSION_RE.sub("", name.lower())
    normalized = _NOISE_RE.sub("", normalized)
    normalized = _NON_ALNUM_RE.sub("", normalized)

    # Stripping punctuation can glue a new noise token together ("bo-ok")
    while True:
        stripped = _NOISE_RE.sub("", normalized)
        if stripped == normalized:
            return normalized
        normalized = stripped


def core_name(name: str) -> str:
    """Longest alphabetic run (3+ letters) of the normalized name.

    Falls back to the normalized string when it has no such run.
    """
    normalized = normalize_filename(name)
    words = _ALPHA_RUN_RE.findall(normalized)
    if not words:
        return normalized
    return max(words, key=len)


def filenames_match(a: str, b: str) -> bool:
    """Binary fuzzy match used for catalog resolution. Symmetric.

    True on normalized equality or containment, or core equality or
    containment. No minimum length is enforced.
    """
    norm_a, norm_b = normalize_filename(a), normalize_filename(b)
    core_a, core_b = core_name(a), core_name(b)

    return (
        norm_a == norm_b
        or norm_b in norm_a
        or norm_a in norm_b
        or core_a == core_b
        or core_b in core_a
        or core_a in core_b
    )


def score_filename_match(candidate: str, uploaded: str) -> int:
    """Score how well ``candidate`` matches ``uploaded``.

    Returns:
        100 exact normalized equality, 80 core equality (core of 4+ letters),
        60 normalized containment, 40 core containment, 0 otherwise.
        Names that normalize to nothing always score 0.
    """
    norm_c, norm_u = normalize_filename(candidate), normalize_filename(uploaded)
    if not norm_c or not norm_u:
        return SCORE_NONE

    if norm_c == norm_u:
        return SCORE_EXACT

    core_c, core_u = core_name(candidate), core_name(uploaded)
    if core_c == core_u and len(core_c) >= MIN_SCORED_CORE_LENGTH:
        return SCORE_CORE_EQUAL

    if norm_u in norm_c or norm_c in norm_u:
        return SCORE_CONTAINS

    if core_c and core_u and (core_u in core_c or core_c in core_u):
        return SCORE_CORE_CONTAINS

    return SCORE_NONE


def best_filename_match(candidates: Iterable[str], uploaded: str) -> Optional[str]:
    """Highest-scoring candidate for ``uploaded``; ties go to the earliest.

    Pass candidates in a deterministic (sorted) order.
    """
    best: Optional[str] = None
    best_score = SCORE_NONE

    for candidate in candidates:
        score = score_filename_match(candidate, uploaded)
        if score > best_score:
            best, best_score = candidate, score

    return best


def entry_candidate_names(entry: CatalogEntry) -> list[str]:
    """Names a submission may match for ``entry``, in priority order.

    Alias filenames first, then the basenames of the report and preview.
    """
    names: list[str] = []
    for name in entry.alias_filenames:
        if name and name not in names:
            names.append(name)
    for ref in (entry.report_ref, entry.preview_ref):
        if ref:
            basename = PurePosixPath(ref.replace("\\", "/")).name
            if basename and basename not in names:
                names.append(basename)
    return names


def first_matching_entry(
    entries: Iterable[CatalogEntry], file_name: Optional[str]
) -> Optional[CatalogEntry]:
    """First entry, in manifest order, with a name matching ``file_name``."""
    if not file_name:
        return None

    for entry in entries:
        for candidate in entry_candidate_names(entry):
            if filenames_match(candidate, file_name):
                return entry
    return None


def cover_override_for(entries: Iterable[CatalogEntry], file_name: Optional[str]) -> Optional[str]:
    """Explicit cover image declared by the first entry whose aliases match."""
    if not file_name:
        return None

    for entry in entries:
        if not entry.cover_image_filename_override:
            continue
        if any(filenames_match(alias, file_name) for alias in entry.alias_filenames if alias):
            return entry.cover_image_filename_override
    return None
