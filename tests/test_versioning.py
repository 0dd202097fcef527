"""
Tests for nuggy.versioning module.

Tests NuGet version handling including:
- Parsing of 1 to 4 part versions with prerelease labels and metadata
- Normalized string form
- SemVer 2.0 precedence
- Equality rules (metadata ignored, labels case-insensitive)
"""

from __future__ import annotations

import pytest

from nuggy.exceptions import InvalidVersionError
from nuggy.versioning import (
    NuGetVersion,
    parse_version,
    try_parse_version,
)


class TestParseVersion:
    """Tests for parsing version strings."""

    def test_parse_full_version(self):
        """Test parsing a version with labels and metadata."""
        v = parse_version("1.2.3-beta.4+sha.abc")

        assert (v.major, v.minor, v.patch, v.revision) == (1, 2, 3, 0)
        assert v.release_labels == ("beta", "4")
        assert v.metadata == "sha.abc"
        assert v.is_prerelease
        assert v.original == "1.2.3-beta.4+sha.abc"

    def test_parse_short_versions(self):
        """Test that missing parts default to zero."""
        assert parse_version("2").normalized == "2.0.0"
        assert parse_version("2.1").normalized == "2.1.0"

    def test_parse_four_part_version(self):
        """Test that a non-zero revision is kept in the normalized form."""
        assert parse_version("1.2.3.4").normalized == "1.2.3.4"
        assert parse_version("1.2.3.0").normalized == "1.2.3"

    @pytest.mark.parametrize(
        "text",
        ["not-a-version", "", "1.2.3.4.5", "v1.0.0", "1.0.0-", "1.0.0-beta..1", "1.0.0-01", "1.x"],
    )
    def test_invalid_versions(self, text):
        """Test that malformed strings are rejected."""
        assert try_parse_version(text) is None
        with pytest.raises(InvalidVersionError, match="Invalid version format"):
            parse_version(text)

    def test_try_parse_none(self):
        """Test that None parses to None."""
        assert try_parse_version(None) is None

    def test_str_keeps_original(self):
        """Test that str() shows the version as it was given."""
        assert str(parse_version("1.0")) == "1.0"
        assert str(NuGetVersion(1, 2, 3)) == "1.2.3"


class TestVersionOrdering:
    """Tests for version precedence."""

    def test_basic_comparison(self):
        """Test major.minor.patch ordering."""
        assert parse_version("1.2.0") > parse_version("1.1.9")
        assert parse_version("1.1.9") < parse_version("1.2.0")
        assert parse_version("1.10.0") > parse_version("1.9.0")
        assert parse_version("1.2.0") == parse_version("1.2.0")

    def test_release_beats_prerelease(self):
        """Test that a release sorts after its prereleases."""
        assert parse_version("1.0.0") > parse_version("1.0.0-rc.1")
        assert parse_version("1.1.0-beta") > parse_version("1.0.5")

    def test_prerelease_labels(self):
        """Test SemVer 2.0 label precedence."""
        ordered = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-beta.2",
            "1.0.0-beta.11",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        parsed = [parse_version(v) for v in ordered]

        assert sorted(reversed(parsed)) == parsed

    def test_revision_ordering(self):
        """Test that the fourth part participates in ordering."""
        assert parse_version("1.0.0.1") > parse_version("1.0.0")

    def test_sort_descending(self):
        """Test sorting a version list highest first."""
        versions = [parse_version(v) for v in ["1.0.0", "1.1.0-beta", "1.0.5"]]

        result = sorted(versions, reverse=True)

        assert [v.normalized for v in result] == ["1.1.0-beta", "1.0.5", "1.0.0"]


class TestVersionEquality:
    """Tests for version equality."""

    def test_metadata_ignored(self):
        """Test that build metadata does not affect equality."""
        assert parse_version("1.0.0+abc") == parse_version("1.0.0+def")
        assert parse_version("1.0.0+abc") == parse_version("1.0.0")

    def test_label_case_ignored(self):
        """Test that label case does not affect equality or hashing."""
        a = parse_version("1.0.0-Beta")
        b = parse_version("1.0.0-beta")

        assert a == b
        assert hash(a) == hash(b)

    def test_short_and_long_forms_equal(self):
        """Test that 1.0 and 1.0.0.0 are the same version."""
        assert parse_version("1.0") == parse_version("1.0.0.0")

    def test_not_equal_to_string(self):
        """Test that versions do not compare equal to plain strings."""
        assert parse_version("1.0.0") != "1.0.0"
