"""Tests for the precanned tag codec.

Tests cover:
- serialize_tag: compact JSON, fixed keys, details merged at top level
- parse_tag: round trip, non-JSON and non-precanned metadata
- tag_like_pattern: fragment match against serialized tags, LIKE escaping
"""

import json

import pytest

from precanned_contracts import PrecannedTag
from precanned_storage.tags import parse_tag, serialize_tag, tag_like_pattern

pytestmark = pytest.mark.unit


class TestSerializeTag:
    """Tests for serialize_tag()."""

    def test_compact_json(self):
        text = serialize_tag(PrecannedTag(precanned_key="wool", variant="completed"))

        assert " " not in text
        assert '"precannedKey":"wool"' in text

    def test_fixed_keys_present(self):
        payload = json.loads(
            serialize_tag(
                PrecannedTag(
                    precanned_key="wool",
                    variant="preview",
                    upload_file_names=["Wool.pdf"],
                    source_path="Wool/Preview/mini.html",
                )
            )
        )

        assert payload["precanned"] is True
        assert payload["precannedKey"] == "wool"
        assert payload["variant"] == "preview"
        assert payload["uploadFileNames"] == ["Wool.pdf"]
        assert payload["sourcePath"] == "Wool/Preview/mini.html"

    def test_details_merged(self):
        payload = json.loads(
            serialize_tag(PrecannedTag(precanned_key="wool", details={"seededFileName": "x.pdf"}))
        )

        assert payload["seededFileName"] == "x.pdf"


class TestParseTag:
    """Tests for parse_tag()."""

    def test_round_trip(self):
        tag = PrecannedTag(
            precanned_key="beach-read",
            variant="upload",
            upload_file_names=["beach read.pdf"],
            source_path="uploads/beach.png",
            details={"coverImageData": "data:image/png;base64,AAAA"},
        )

        assert parse_tag(serialize_tag(tag)) == tag

    @pytest.mark.parametrize("metadata", [None, "", "not json", "[1, 2]", '{"other": 1}'])
    def test_non_precanned_returns_none(self, metadata):
        assert parse_tag(metadata) is None


class TestTagLikePattern:
    """Tests for tag_like_pattern()."""

    def test_wraps_fragment_in_wildcards(self):
        assert tag_like_pattern("wool") == '%"precannedKey":"wool"%'

    def test_fragment_occurs_in_serialized_tag(self):
        text = serialize_tag(PrecannedTag(precanned_key="wool", variant="video"))
        fragment = tag_like_pattern("wool").strip("%")

        assert fragment in text

    def test_prefix_key_does_not_match(self):
        text = serialize_tag(PrecannedTag(precanned_key="wool-2"))
        fragment = tag_like_pattern("wool").strip("%")

        assert fragment not in text

    def test_escapes_like_metacharacters(self):
        pattern = tag_like_pattern("a_b%c")

        assert "a\\_b\\%c" in pattern
