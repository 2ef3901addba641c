"""
Key Grouping and Version Tracking
=================================

Collapses declarations into one VersionTracker per EquivalenceKey. Each
tracker maps a (version string, default-features) pair to the members using
it and whether the pair is already present in [workspace.dependencies].

Every member declaration and every shared-pool entry for a key lands in
exactly one tracker entry. Declarations already using { workspace = true }
are not tracked here; they only matter for unused detection.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from wsdeps_common.constants import SHARED_POOL_MARKER
from wsdeps_common.logger import get_logger

from .models import EquivalenceKey, MemberUse, VersionSpec, WorkspaceData

logger = get_logger(__name__)

SpecKey = Tuple[str, bool]


@dataclass
class VersionUsage:
    """Who uses one (version, default-features) pair."""

    members: List[MemberUse] = field(default_factory=list)
    # Whether this exact pair is defined in [workspace.dependencies]
    in_workspace: bool = False

    def to_member_list(self) -> List[str]:
        """Member names, with the shared pool shown as a pseudo member."""
        result = [use.member for use in self.members]
        if self.in_workspace:
            result.append(SHARED_POOL_MARKER)
        return result


class VersionTracker:
    """All observed versions of one equivalence key."""

    def __init__(self, key: EquivalenceKey):
        self.key = key
        self._entries: Dict[SpecKey, VersionUsage] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"VersionTracker({self.key.name!r}, versions={self.version_strings()})"

    def _entry(self, version: str, default_features: bool) -> VersionUsage:
        return self._entries.setdefault((version, default_features), VersionUsage())

    def add_member(self, version: str, default_features: bool, use: MemberUse) -> None:
        self._entry(version, default_features).members.append(use)

    def add_shared(self, version: str, default_features: bool) -> None:
        self._entry(version, default_features).in_workspace = True

    @property
    def has_shared(self) -> bool:
        """True when the key already exists in the shared pool."""
        return any(usage.in_workspace for usage in self._entries.values())

    def version_strings(self) -> List[str]:
        """Distinct version strings, sorted."""
        return sorted({version for version, _ in self._entries})

    def member_lists(self) -> Dict[str, List[str]]:
        """
        Version string -> member names, merged across default-features values.

        This is the input of version resolution and the resolved_from record.
        """
        result: Dict[str, List[str]] = {}
        for (version, _), usage in sorted(self._entries.items()):
            result.setdefault(version, []).extend(usage.to_member_list())
        for names in result.values():
            names.sort()
        return result

    def members(self) -> List[MemberUse]:
        """Every real member use (shared-pool entries excluded)."""
        uses = [use for usage in self._entries.values() for use in usage.members]
        return sorted(uses, key=MemberUse.sort_key)

    def distinct_member_count(self) -> int:
        return len({use.member for usage in self._entries.values() for use in usage.members})

    def default_features_for(self, versions: Set[str]) -> Set[bool]:
        """Distinct default-features values recorded against the given versions."""
        return {df for version, df in self._entries if version in versions}

    def all_default_features(self) -> Set[bool]:
        """Distinct default-features values across the whole key."""
        return {df for _, df in self._entries}

    def specs(self) -> List[VersionSpec]:
        """Every distinct (version, default-features) pair, sorted."""
        return [
            VersionSpec(
                version=version,
                default_features=df,
                members=sorted(usage.members, key=MemberUse.sort_key),
                in_workspace=usage.in_workspace,
            )
            for (version, df), usage in sorted(self._entries.items())
        ]


def group_declarations(data: WorkspaceData) -> Dict[EquivalenceKey, VersionTracker]:
    """
    Build one tracker per equivalence key from shared-pool entries and member
    declarations.

    The mapping itself is unordered; callers sort keys before producing
    results.
    """
    trackers: Dict[EquivalenceKey, VersionTracker] = {}

    def tracker_for(key: EquivalenceKey) -> VersionTracker:
        if key not in trackers:
            trackers[key] = VersionTracker(key)
        return trackers[key]

    for shared in data.shared_deps.values():
        tracker_for(shared.key).add_shared(shared.version, shared.default_features)

    declaration_count = 0
    for member_name, records in data.member_deps.items():
        for record in records:
            tracker_for(record.key).add_member(
                record.version,
                record.default_features,
                MemberUse(member=member_name, section=record.section),
            )
            declaration_count += 1

    logger.debug(
        f"Grouped {declaration_count} declarations and {len(data.shared_deps)} "
        f"shared entries into {len(trackers)} keys"
    )
    return trackers
