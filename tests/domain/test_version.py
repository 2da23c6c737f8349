"""Tests for semver helpers and npm range translation."""

import pytest
from packaging.version import InvalidVersion, Version

from create_react_app.domain.version import (
    InvalidRangeError,
    coerce_version,
    is_valid_range,
    parse_range,
    satisfies,
    to_version,
    valid_semver,
    version_gte,
    version_lt,
)


class TestValidSemver:
    """Test strict semver detection."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1.2.3", "1.2.3"),
            ("v1.2.3", "1.2.3"),
            ("=1.2.3", "1.2.3"),
            ("1.2.3-alpha.1", "1.2.3-alpha.1"),
            ("1.2.3+build.5", "1.2.3"),
        ],
    )
    def test_accepts_semver(self, value, expected):
        """Test that strict versions are cleaned."""
        assert valid_semver(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "", "1.2", "01.2.3", "next", "^1.2.3", "1.2.3.4"]
    )
    def test_rejects_non_semver(self, value):
        """Test that partial versions, tags and ranges are rejected."""
        assert valid_semver(value) is None


class TestCoerceVersion:
    """Test loose version extraction."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("3.3.0", "3.3.0"),
            ("v15.0.0-nightly", "15.0.0"),
            ("3", "3.0.0"),
            ("react-scripts 3.2", "3.2.0"),
        ],
    )
    def test_coerces(self, value, expected):
        """Test that the first numeric run is padded to three parts."""
        assert coerce_version(value) == expected

    @pytest.mark.parametrize("value", [None, "", "latest", "next"])
    def test_no_digits(self, value):
        """Test that strings without digits cannot be coerced."""
        assert coerce_version(value) is None


class TestComparisons:
    """Test semver ordering through PEP 440 versions."""

    def test_prerelease_mapping(self):
        """Test that known prerelease labels map onto PEP 440."""
        assert to_version("1.0.0-alpha.1") == Version("1.0.0a1")
        assert to_version("1.0.0-beta") == Version("1.0.0b0")
        assert to_version("1.0.0-rc.2") == Version("1.0.0rc2")

    def test_unknown_prerelease_sorts_before_release(self):
        """Test that nightly tags still precede the release."""
        assert version_lt("1.22.0-nightly", "1.22.0")

    def test_invalid_version_raises(self):
        """Test that non-semver input is rejected."""
        with pytest.raises(InvalidVersion):
            to_version("latest")

    def test_gte_and_lt(self):
        """Test the convenience comparisons."""
        assert version_gte("6.14.4", "6.0.0")
        assert not version_gte("5.10.0", "6.0.0")
        assert version_lt("1.9.4", "2.0.0")
        assert not version_lt("2.0.0", "2.0.0")


class TestRanges:
    """Test npm range parsing and matching."""

    @pytest.mark.parametrize(
        ("version", "range_text", "expected"),
        [
            ("v18.17.1", ">=14", True),
            ("v12.22.0", ">=14", False),
            ("16.14.0", "^16.14.0 || >=18", True),
            ("17.0.0", "^16.14.0 || >=18", False),
            ("18.0.0", "^16.14.0 || >=18", True),
            ("0.2.5", "^0.2.3", True),
            ("0.3.0", "^0.2.3", False),
            ("1.2.9", "~1.2.3", True),
            ("1.3.0", "~1.2.3", False),
            ("1.5.0", "1.2.3 - 1.5", True),
            ("1.6.0", "1.2.3 - 1.5", False),
            ("2.4.0", "2.x", True),
            ("3.0.0", "2.x", False),
            ("9.9.9", "*", True),
            ("14.0.0", ">= 14.0.0", True),
            ("v15.0.0-nightly2020", ">=14", True),
        ],
    )
    def test_satisfies(self, version, range_text, expected):
        """Test membership across range forms."""
        assert satisfies(version, range_text) is expected

    def test_union_produces_one_set_per_clause(self):
        """Test that each || clause becomes one specifier set."""
        assert len(parse_range(">=10 <12 || >=14")) == 2

    @pytest.mark.parametrize("range_text", ["^18.2.0", "~1.0", ">=1 <2"])
    def test_valid_ranges(self, range_text):
        """Test that well-formed ranges are accepted."""
        assert is_valid_range(range_text)

    @pytest.mark.parametrize("range_text", ["^latest", "^next", ">=abc"])
    def test_invalid_ranges(self, range_text):
        """Test that tags and garbage are rejected."""
        assert not is_valid_range(range_text)

    def test_satisfies_rejects_invalid_range(self):
        """Test that an unparseable range raises."""
        with pytest.raises(InvalidRangeError):
            satisfies("1.0.0", "^latest")
