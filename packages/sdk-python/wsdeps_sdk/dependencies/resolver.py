"""
Version Conflict Resolution
===========================

Picks one version string for a dependency declared with several versions
across the workspace.

Resolution Strategies:
1. skip               -> always fails (leave conflicts alone)
2. fail               -> always fails (treat any conflict as an error)
3. highest            -> highest version by semver precedence
4. lowest             -> lowest version by semver precedence
5. highest-compatible -> highest candidate satisfying every declaration
                         read as a caret requirement ("1.2" means ^1.2)

Failures are raised as VersionResolutionError subclasses. They are never
fatal for a run: the analyzer turns them into a conflict for that one
dependency.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from wsdeps_common.errors import (
    IncompatibleRequirementsError,
    PolicyRejectionError,
    VersionParseError,
)
from wsdeps_common.logger import get_logger

from .version import Version, VersionReq, parse_version_lenient

logger = get_logger(__name__)


class ResolutionStrategy(str, Enum):
    """Strategy for resolving version conflicts."""

    SKIP = "skip"  # Skip dependencies with conflicting versions
    FAIL = "fail"  # Fail on version conflicts
    HIGHEST = "highest"  # Use the highest version
    LOWEST = "lowest"  # Use the lowest version
    HIGHEST_COMPATIBLE = "highest-compatible"  # Highest SemVer-compatible version

    @property
    def label(self) -> str:
        """Name shown in text reports, e.g. HighestCompatible."""
        return "".join(part.capitalize() for part in self.value.split("-"))


@dataclass
class ResolvedVersion:
    """Result of resolving a version conflict."""

    version: str
    # All members across every original version
    members: List[str]


class VersionResolver:
    """
    Resolves version conflicts for a single dependency.

    The input is a map of original version string -> member names. The
    resolver never looks at member names when choosing; they are passed
    through so callers get a complete member list back.
    """

    def __init__(self, strategy: ResolutionStrategy = ResolutionStrategy.HIGHEST_COMPATIBLE):
        self.strategy = ResolutionStrategy(strategy)

    def resolve(self, version_map: Dict[str, List[str]]) -> ResolvedVersion:
        """
        Resolve the version map under the configured strategy.

        Raises:
            PolicyRejectionError: skip or fail strategy
            VersionParseError: no version could be parsed
            IncompatibleRequirementsError: no candidate satisfies every requirement
        """
        versions = sorted(version_map)
        members = [m for version in versions for m in version_map[version]]

        if self.strategy == ResolutionStrategy.SKIP:
            raise PolicyRejectionError("Skip strategy")
        if self.strategy == ResolutionStrategy.FAIL:
            raise PolicyRejectionError("Version conflict detected with fail strategy")
        if self.strategy == ResolutionStrategy.HIGHEST:
            resolved = self._resolve_by_order(versions, take_highest=True)
        elif self.strategy == ResolutionStrategy.LOWEST:
            resolved = self._resolve_by_order(versions, take_highest=False)
        else:
            resolved = self._resolve_highest_compatible(versions)

        logger.debug(f"Resolved {versions} -> {resolved} using {self.strategy.value}")
        return ResolvedVersion(version=str(resolved), members=members)

    def _candidates(self, versions: List[str]) -> List[Version]:
        """Leniently parsed versions, sorted ascending. Unparseable ones are dropped."""
        parsed = [parse_version_lenient(v) for v in versions]
        candidates = sorted(v for v in parsed if v is not None)
        if not candidates:
            raise VersionParseError("No valid semver versions found")
        return candidates

    def _resolve_by_order(self, versions: List[str], take_highest: bool) -> Version:
        candidates = self._candidates(versions)
        return candidates[-1] if take_highest else candidates[0]

    def _resolve_highest_compatible(self, versions: List[str]) -> Version:
        requirements = [self._as_requirement(v) for v in versions]
        candidates = self._candidates(versions)

        for candidate in reversed(candidates):
            if all(req.matches(candidate) for req in requirements):
                return candidate

        raise IncompatibleRequirementsError("No version satisfies all requirements")

    @staticmethod
    def _as_requirement(version_str: str) -> VersionReq:
        """Read a declared version as a requirement ("1.0" -> ^1.0)."""
        try:
            return VersionReq.parse(version_str)
        except VersionParseError:
            pass

        version = parse_version_lenient(version_str)
        if version is None:
            raise VersionParseError(f"Invalid version: {version_str}")
        return VersionReq.caret(version)


def resolve_version_conflict(
    version_map: Dict[str, List[str]],
    strategy: ResolutionStrategy,
) -> ResolvedVersion:
    """
    Convenience function to resolve a single version conflict.

    Args:
        version_map: Original version string -> member names
        strategy: Resolution strategy to apply

    Returns:
        ResolvedVersion with the chosen version and all members
    """
    return VersionResolver(strategy).resolve(version_map)
