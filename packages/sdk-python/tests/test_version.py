"""
Tests for version parsing, ordering and Cargo requirement matching.

Tests cover:
- Strict and lenient version parsing
- Semantic version precedence
- Requirement parsing (caret, tilde, comparison, wildcard, multi-clause)
- Pre-release gating
"""

import pytest

from wsdeps_common.errors import VersionParseError
from wsdeps_sdk.dependencies.version import (
    RequirementOperator,
    Version,
    VersionReq,
    parse_comparator,
    parse_version,
    parse_version_lenient,
    parse_version_req,
)

# ============================================================================
# Version Parsing Tests
# ============================================================================


class TestVersionParsing:
    """Tests for strict version parsing."""

    def test_parse_simple_version(self):
        """Test parsing a full version like 1.2.3."""
        v = parse_version("1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.pre == ()
        assert not v.is_prerelease

    def test_parse_prerelease_and_build(self):
        """Test parsing pre-release identifiers and build metadata."""
        v = parse_version("1.0.0-alpha.1+build.5")
        assert v.pre == ("alpha", "1")
        assert v.build == ("build", "5")
        assert str(v) == "1.0.0-alpha.1+build.5"

    @pytest.mark.parametrize("text", ["1.0", "2", "v1.0.0", "01.0.0", "1.0.0.0", "", "1.0.*"])
    def test_strict_parse_rejects(self, text):
        """Strict parsing needs exactly three numeric components."""
        with pytest.raises(VersionParseError):
            parse_version(text)


class TestLenientParsing:
    """Tests for parse_version_lenient."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("1.0.0", "1.0.0"),
            ("1.0", "1.0.0"),
            ("2", "2.0.0"),
            ("0.69", "0.69.0"),
            ("1.2.3", "1.2.3"),
            ("1.0.0-alpha", "1.0.0-alpha"),
            ("1.0.0+build", "1.0.0+build"),
        ],
    )
    def test_lenient_parse(self, text, expected):
        """Missing components are padded with zeros."""
        assert str(parse_version_lenient(text)) == expected

    @pytest.mark.parametrize("text", ["1.0-rc1", "v1.0.0", "1.2.3.4", "1.0.*", "abc", ""])
    def test_lenient_parse_rejects(self, text):
        """Suffixes on abbreviated versions and other junk do not parse."""
        assert parse_version_lenient(text) is None


class TestVersionOrdering:
    """Tests for semantic version precedence."""

    def test_numeric_ordering(self):
        """Components compare numerically, not lexically."""
        assert parse_version("1.10.0") > parse_version("1.9.0")
        assert parse_version("0.70.0") > parse_version("0.69.2")

    def test_prerelease_sorts_below_release(self):
        """1.0.0-rc.1 < 1.0.0."""
        assert parse_version("1.0.0-rc.1") < parse_version("1.0.0")

    def test_prerelease_identifier_ordering(self):
        """Identifiers follow semver rules."""
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
        versions = [parse_version(v) for v in ordered]
        assert sorted(reversed(versions)) == versions

    def test_build_metadata_ignored(self):
        """Build metadata does not take part in precedence."""
        assert parse_version("1.0.0+a") == parse_version("1.0.0+b")

    def test_padded_versions_equal(self):
        """Different spellings of the same version compare equal."""
        assert parse_version_lenient("1.0") == parse_version_lenient("1.0.0")


# ============================================================================
# Requirement Tests
# ============================================================================


def _matches(req: str, version: str) -> bool:
    return parse_version_req(req).matches(Version.parse(version))


class TestRequirementParsing:
    """Tests for requirement syntax."""

    def test_bare_version_is_caret(self):
        """A bare version means ^version."""
        comparator = parse_comparator("1.2")
        assert comparator.op == RequirementOperator.CARET
        assert (comparator.major, comparator.minor, comparator.patch) == (1, 2, None)

    @pytest.mark.parametrize(
        "text,op",
        [
            ("=1.0.0", RequirementOperator.EXACT),
            (">1.0", RequirementOperator.GREATER),
            (">=1.0", RequirementOperator.GREATER_EQ),
            ("<2", RequirementOperator.LESS),
            ("<=2.0.0", RequirementOperator.LESS_EQ),
            ("~1.2", RequirementOperator.TILDE),
            ("^1.2", RequirementOperator.CARET),
            ("1.*", RequirementOperator.WILDCARD),
            ("*", RequirementOperator.WILDCARD),
        ],
    )
    def test_operators(self, text, op):
        """Every Cargo operator is recognised."""
        assert parse_comparator(text).op == op

    def test_multiple_comparators(self):
        """Comma-separated clauses all apply."""
        req = VersionReq.parse(">=1.2, <1.5")
        assert len(req.comparators) == 2
        assert str(req) == ">=1.2, <1.5"

    @pytest.mark.parametrize("text", ["", "invalid1", "1.0-rc1", "1.*.3", ">=", "1.0,", "v1"])
    def test_invalid_requirements(self, text):
        """Unparseable requirements raise VersionParseError."""
        with pytest.raises(VersionParseError):
            VersionReq.parse(text)


class TestRequirementMatching:
    """Tests for VersionReq.matches."""

    @pytest.mark.parametrize(
        "req,version,expected",
        [
            # caret, major > 0
            ("1.2", "1.2.0", True),
            ("1.2", "1.9.9", True),
            ("1.2", "1.1.0", False),
            ("1.2", "2.0.0", False),
            ("^1.2.3", "1.2.2", False),
            # caret, zero major
            ("0.2.3", "0.2.9", True),
            ("0.2.3", "0.3.0", False),
            ("0.0.3", "0.0.3", True),
            ("0.0.3", "0.0.4", False),
            ("0.0", "0.0.7", True),
            ("0", "0.9.0", True),
            # tilde
            ("~1.2.3", "1.2.9", True),
            ("~1.2.3", "1.3.0", False),
            ("~1", "1.9.0", True),
            # comparisons
            (">=1.2, <1.5", "1.4.9", True),
            (">=1.2, <1.5", "1.5.0", False),
            (">1.0", "1.0.5", False),
            (">1.0", "1.1.0", True),
            ("<=1.2", "1.2.8", True),
            ("=1.2.3", "1.2.3", True),
            ("=1.2.3", "1.2.4", False),
            # wildcards
            ("1.*", "1.7.0", True),
            ("1.2.*", "1.3.0", False),
            ("*", "42.0.0", True),
        ],
    )
    def test_matches(self, req, version, expected):
        """Cargo requirement semantics."""
        assert _matches(req, version) is expected

    def test_prerelease_needs_matching_prerelease_comparator(self):
        """Pre-releases only match requirements naming the same release."""
        assert not _matches("1.0", "1.1.0-beta")
        assert not _matches(">=1.0.0", "2.0.0-alpha")
        assert _matches("^1.0.0-alpha", "1.0.0-beta")
        assert _matches("^1.0.0-alpha", "1.0.1")
        assert not _matches("^1.0.0-alpha", "1.0.1-alpha")

    def test_caret_from_version(self):
        """VersionReq.caret builds ^version from a parsed version."""
        req = VersionReq.caret(Version.parse("1.5.0"))
        assert req.matches(Version.parse("1.6.0"))
        assert not req.matches(Version.parse("1.4.0"))
        assert str(req) == "^1.5.0"
