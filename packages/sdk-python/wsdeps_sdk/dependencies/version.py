"""
Version Parsing and Comparison
==============================

Provides utilities for parsing and comparing Cargo package versions and
version requirements, following Semantic Versioning 2.0 precedence and
Cargo's requirement syntax.

Manifest version strings are often abbreviated ("1.0", "2"), so ordering
comparisons go through parse_version_lenient(), which pads missing numeric
components before strict parsing.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from wsdeps_common.errors import VersionParseError

_NUMERIC = r"0|[1-9]\d*"
_IDENT = r"[0-9A-Za-z-]+"
_DOTTED = rf"{_IDENT}(?:\.{_IDENT})*"

_VERSION_RE = re.compile(
    rf"^(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<pre>{_DOTTED}))?(?:\+(?P<build>{_DOTTED}))?$"
)

_WILDCARDS = ("*", "x", "X")
_PART = rf"{_NUMERIC}|\*|x|X"

_COMPARATOR_RE = re.compile(
    rf"^(?P<op>=|>=|>|<=|<|~|\^)?\s*"
    rf"(?P<major>{_PART})(?:\.(?P<minor>{_PART}))?(?:\.(?P<patch>{_PART}))?"
    rf"(?:-(?P<pre>{_DOTTED}))?(?:\+(?P<build>{_DOTTED}))?$"
)


def _pre_key(pre: Tuple[str, ...]) -> tuple:
    """
    Sort key for pre-release identifiers.

    A release (no identifiers) sorts above any pre-release of the same
    version. Numeric identifiers compare numerically and sort below
    alphanumeric ones; a shorter identifier list sorts first when it is a
    prefix of the longer one.
    """
    if not pre:
        return (1,)
    parts = []
    for ident in pre:
        if ident.isdigit():
            parts.append((0, int(ident), ""))
        else:
            parts.append((1, 0, ident))
    return (0, tuple(parts))


@dataclass
class Version:
    """
    Represents a concrete semantic version.

    Supports standard version formats like:
    - 1.0.0
    - 0.69.2
    - 1.0.0-alpha.1 (pre-release)
    - 1.0.0+build.5 (build metadata, ignored for precedence)
    """

    major: int
    minor: int = 0
    patch: int = 0
    pre: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, version_str: str) -> "Version":
        """
        Strictly parse a full three-component version.

        Raises:
            VersionParseError: If the string is not a valid semantic version
        """
        match = _VERSION_RE.match(version_str)
        if not match:
            raise VersionParseError(f"Invalid version string: '{version_str}'")
        pre = match.group("pre")
        build = match.group("build")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            pre=tuple(pre.split(".")) if pre else (),
            build=tuple(build.split(".")) if build else (),
        )

    def __str__(self) -> str:
        """Convert version to string."""
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            base += "-" + ".".join(self.pre)
        if self.build:
            base += "+" + ".".join(self.build)
        return base

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    def as_tuple(self) -> tuple:
        """Convert to tuple for precedence comparison."""
        return (self.major, self.minor, self.patch, _pre_key(self.pre))

    def __lt__(self, other: "Version") -> bool:
        return self.as_tuple() < other.as_tuple()

    def __le__(self, other: "Version") -> bool:
        return self.as_tuple() <= other.as_tuple()

    def __gt__(self, other: "Version") -> bool:
        return self.as_tuple() > other.as_tuple()

    def __ge__(self, other: "Version") -> bool:
        return self.as_tuple() >= other.as_tuple()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return False
        return self.as_tuple() == other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())


def parse_version(version_str: str) -> Version:
    """
    Parse a full version string into a Version object.

    Args:
        version_str: Version string like "1.0.0" or "1.0.0-rc.1"

    Returns:
        Version object

    Raises:
        VersionParseError: If version string is invalid
    """
    return Version.parse(version_str)


def parse_version_lenient(version_str: str) -> Optional[Version]:
    """
    Parse a version string, padding missing components.

    Examples:
        "1.0.0" -> 1.0.0
        "1.0"   -> 1.0.0
        "2"     -> 2.0.0
        "1.0-rc1", "v1.0.0", "1.0.*" -> None

    Pre-release and build suffixes are only accepted on an already complete
    three-component version.
    """
    try:
        return Version.parse(version_str)
    except VersionParseError:
        pass

    parts = version_str.split(".")
    if len(parts) == 1:
        normalized = f"{version_str}.0.0"
    elif len(parts) == 2:
        normalized = f"{version_str}.0"
    else:
        return None

    try:
        return Version.parse(normalized)
    except VersionParseError:
        return None


# ============================================================================
# Version Requirements
# ============================================================================


class RequirementOperator(str, Enum):
    """Cargo requirement operators."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"  # Also used for a bare version
    WILDCARD = "*"


@dataclass
class Comparator:
    """
    A single requirement clause such as ^1.2, >=0.4.1 or 1.*.

    minor and patch are None when the clause leaves them out, which widens
    the range (^0.0 is not the same as ^0.0.0).
    """

    op: RequirementOperator
    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    pre: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.major is None:
            return "*"
        parts = [str(self.major)]
        for part in (self.minor, self.patch):
            if part is None:
                break
            parts.append(str(part))
        text = ".".join(parts)
        if self.op == RequirementOperator.WILDCARD:
            return f"{text}.*"
        if self.pre:
            text += "-" + ".".join(self.pre)
        return f"{self.op.value}{text}"

    def matches(self, version: Version) -> bool:
        """Check the version against this clause, ignoring pre-release gating."""
        op = self.op
        if op == RequirementOperator.WILDCARD:
            return self.major is None or self._matches_exact(version, compare_pre=False)
        if op == RequirementOperator.EXACT:
            return self._matches_exact(version)
        if op == RequirementOperator.GREATER:
            return self._matches_greater(version)
        if op == RequirementOperator.GREATER_EQ:
            return self._matches_exact(version) or self._matches_greater(version)
        if op == RequirementOperator.LESS:
            return self._matches_less(version)
        if op == RequirementOperator.LESS_EQ:
            return self._matches_exact(version) or self._matches_less(version)
        if op == RequirementOperator.TILDE:
            return self._matches_tilde(version)
        return self._matches_caret(version)

    def allows_prerelease_of(self, version: Version) -> bool:
        """A pre-release only matches a clause naming a pre-release of the same release."""
        return (
            bool(self.pre)
            and self.major == version.major
            and self.minor == version.minor
            and self.patch == version.patch
        )

    def _matches_exact(self, version: Version, compare_pre: bool = True) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return False
        return not compare_pre or version.pre == self.pre

    def _matches_greater(self, version: Version) -> bool:
        if version.major != self.major:
            return version.major > self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor > self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch > self.patch
        return _pre_key(version.pre) > _pre_key(self.pre)

    def _matches_less(self, version: Version) -> bool:
        if version.major != self.major:
            return version.major < self.major
        if self.minor is None:
            return False
        if version.minor != self.minor:
            return version.minor < self.minor
        if self.patch is None:
            return False
        if version.patch != self.patch:
            return version.patch < self.patch
        return _pre_key(version.pre) < _pre_key(self.pre)

    def _matches_tilde(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is not None and version.minor != self.minor:
            return False
        if self.patch is not None and version.patch != self.patch:
            return version.patch > self.patch
        return _pre_key(version.pre) >= _pre_key(self.pre)

    def _matches_caret(self, version: Version) -> bool:
        if version.major != self.major:
            return False
        if self.minor is None:
            return True
        minor = self.minor
        if self.patch is None:
            if self.major > 0:
                return version.minor >= minor
            return version.minor == minor
        patch = self.patch

        if self.major > 0:
            if version.minor != minor:
                return version.minor > minor
            if version.patch != patch:
                return version.patch > patch
        elif minor > 0:
            if version.minor != minor:
                return False
            if version.patch != patch:
                return version.patch > patch
        elif version.minor != minor or version.patch != patch:
            return False

        return _pre_key(version.pre) >= _pre_key(self.pre)


def _parse_part(value: Optional[str]) -> Tuple[Optional[int], bool]:
    """Return (number, is_wildcard) for one version component."""
    if value is None:
        return None, False
    if value in _WILDCARDS:
        return None, True
    return int(value), False


def parse_comparator(text: str) -> Comparator:
    """
    Parse one requirement clause.

    Raises:
        VersionParseError: If the clause is not valid requirement syntax
    """
    text = text.strip()
    if text in _WILDCARDS:
        return Comparator(op=RequirementOperator.WILDCARD)

    match = _COMPARATOR_RE.match(text)
    if not match:
        raise VersionParseError(f"Invalid version requirement: '{text}'")

    major, major_wild = _parse_part(match.group("major"))
    minor, minor_wild = _parse_part(match.group("minor"))
    patch, patch_wild = _parse_part(match.group("patch"))
    pre_text = match.group("pre")
    pre = tuple(pre_text.split(".")) if pre_text else ()
    op_text = match.group("op")

    if major_wild:
        if match.group("minor") is not None or op_text:
            raise VersionParseError(f"Invalid version requirement: '{text}'")
        return Comparator(op=RequirementOperator.WILDCARD)

    # A numeric component may not follow a wildcard (1.*.3)
    if minor_wild and match.group("patch") is not None and not patch_wild:
        raise VersionParseError(f"Invalid version requirement: '{text}'")
    if pre and patch is None:
        raise VersionParseError(f"Pre-release requires a full version: '{text}'")

    wildcard = minor_wild or patch_wild
    if wildcard and op_text in (None, "="):
        op = RequirementOperator.WILDCARD
    elif op_text is None:
        op = RequirementOperator.CARET
    else:
        op = RequirementOperator(op_text)

    return Comparator(op=op, major=major, minor=minor, patch=patch, pre=pre)


@dataclass
class VersionReq:
    """
    A Cargo version requirement: comma-separated comparators, all of which
    must match. A bare version such as "1.2" means ^1.2.
    """

    comparators: List[Comparator] = field(default_factory=list)

    @classmethod
    def parse(cls, req_str: str) -> "VersionReq":
        """
        Parse a requirement string like "1.0", "^0.4, <0.4.8" or "~1.2".

        Raises:
            VersionParseError: If any clause is invalid
        """
        stripped = req_str.strip()
        if not stripped:
            raise VersionParseError("Empty version requirement")

        comparators = []
        for part in stripped.split(","):
            if not part.strip():
                raise VersionParseError(f"Invalid version requirement: '{req_str}'")
            comparators.append(parse_comparator(part))
        return cls(comparators=comparators)

    @classmethod
    def caret(cls, version: Version) -> "VersionReq":
        """Build ^version for an already parsed concrete version."""
        return cls(
            comparators=[
                Comparator(
                    op=RequirementOperator.CARET,
                    major=version.major,
                    minor=version.minor,
                    patch=version.patch,
                    pre=version.pre,
                )
            ]
        )

    def __str__(self) -> str:
        return ", ".join(str(c) for c in self.comparators)

    def matches(self, version: Version) -> bool:
        """
        Check whether a concrete version satisfies every comparator.

        Pre-release versions are only accepted when some comparator names a
        pre-release of the same major.minor.patch.
        """
        if not all(c.matches(version) for c in self.comparators):
            return False
        if not version.is_prerelease:
            return True
        return any(c.allows_prerelease_of(version) for c in self.comparators)


def parse_version_req(req_str: str) -> VersionReq:
    """Parse a Cargo version requirement string."""
    return VersionReq.parse(req_str)
