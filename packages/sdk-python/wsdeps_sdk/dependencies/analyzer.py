"""
Dependency Analyzer
===================

Decides, for every dependency declared across the workspace, whether it can
be served from a single [workspace.dependencies] entry.

This is the main entry point of the consolidation engine:

1. Group declarations by equivalence key (tracker.py)
2. Resolve multi-version keys with the configured strategy (resolver.py)
3. Reconcile default-features for the chosen version
4. Apply the exclusion list and the minimum-members threshold
5. Keep one key per name, since the shared pool is keyed by name
6. Flag shared-pool entries nobody uses

A failure on one key never affects another key; it becomes a
ConflictingDependency instead. All result lists are sorted before they are
returned.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from wsdeps_common.constants import Defaults
from wsdeps_common.errors import ValidationError, VersionResolutionError
from wsdeps_common.logger import get_logger

from .models import (
    ALL_SECTIONS,
    CommonDependency,
    ConflictingDependency,
    ConflictType,
    DepSection,
    DependencyAnalysis,
    EquivalenceKey,
    WorkspaceData,
)
from .resolver import ResolutionStrategy, VersionResolver
from .tracker import VersionTracker, group_declarations
from .version import parse_version_lenient

logger = get_logger(__name__)


class ConsolidationConfig(BaseModel):
    """Engine configuration."""

    strategy: ResolutionStrategy = ResolutionStrategy(Defaults.STRATEGY)
    min_members: int = Defaults.MIN_MEMBERS
    exclude: Set[str] = set()
    sections: List[DepSection] = list(ALL_SECTIONS)

    model_config = ConfigDict(frozen=True)

    @field_validator("min_members")
    @classmethod
    def validate_min_members(cls, v: int) -> int:
        """Threshold must be a positive integer"""
        if v < 1:
            raise ValidationError(f"min_members must be at least 1, got {v}")
        return v

    @field_validator("sections")
    @classmethod
    def validate_sections(cls, v: List[DepSection]) -> List[DepSection]:
        """At least one section has to be processed"""
        if not v:
            raise ValidationError("At least one dependency section must be selected")
        return v


def should_consolidate(has_workspace: bool, member_count: int, min_members: int) -> bool:
    """Check if we should consolidate based on workspace presence and member count."""
    return (has_workspace and member_count > 0) or (
        not has_workspace and member_count >= min_members
    )


def _matching_versions(tracker: VersionTracker, resolved: str) -> Set[str]:
    """Original version strings that denote the resolved concrete version."""
    target = parse_version_lenient(resolved)
    matching = set()
    for version in tracker.version_strings():
        if version == resolved:
            matching.add(version)
            continue
        parsed = parse_version_lenient(version)
        if parsed is not None and target is not None and parsed == target:
            matching.add(version)
    return matching


class DependencyAnalyzer:
    """
    Analyzes parsed workspace data and produces a DependencyAnalysis.

    Handles:
    - Version resolution for keys declared with several versions
    - default-features reconciliation
    - Consolidation eligibility (exclusions, minimum members, one key per name)
    - Unused shared dependency detection
    """

    def __init__(self, config: Optional[ConsolidationConfig] = None):
        self.config = config or ConsolidationConfig()
        self.resolver = VersionResolver(self.config.strategy)

    def analyze(self, data: WorkspaceData) -> DependencyAnalysis:
        """
        Analyze all workspace dependencies in one pass.

        Args:
            data: Parsed shared-pool entries, member declarations and refs

        Returns:
            DependencyAnalysis with sorted consolidations, conflicts and unused entries
        """
        data = self._restrict_to_sections(data)
        trackers = group_declarations(data)

        common_deps: List[CommonDependency] = []
        conflicts: List[ConflictingDependency] = []

        for key in sorted(trackers, key=lambda k: k.sort_key()):
            if key.name in self.config.exclude:
                logger.debug(f"Skipping excluded dependency {key.name}")
                continue

            outcome = self._analyze_key(trackers[key])
            if isinstance(outcome, ConflictingDependency):
                conflicts.append(outcome)
            elif outcome is not None:
                common_deps.append(outcome)

        common_deps, name_conflicts = self._claim_shared_names(common_deps, trackers, data)
        if name_conflicts:
            conflicts = sorted(
                conflicts + name_conflicts,
                key=lambda c: EquivalenceKey(c.name, c.package, c.registry).sort_key(),
            )

        unused = self._find_unused(data, common_deps)

        logger.info(
            f"Analysis complete: {len(common_deps)} to consolidate, "
            f"{len(conflicts)} conflicts, {len(unused)} unused"
        )
        return DependencyAnalysis(
            common_deps=common_deps,
            conflicts=conflicts,
            unused_workspace_deps=unused,
        )

    def _restrict_to_sections(self, data: WorkspaceData) -> WorkspaceData:
        sections = set(self.config.sections)
        member_deps: Dict[str, list] = {}
        for member, records in data.member_deps.items():
            kept = [r for r in records if r.section in sections]
            if kept:
                member_deps[member] = kept
        return WorkspaceData(
            shared_deps=data.shared_deps,
            member_deps=member_deps,
            workspace_refs=[r for r in data.workspace_refs if r.section in sections],
        )

    def _analyze_key(self, tracker: VersionTracker):
        """Return a CommonDependency, a ConflictingDependency, or None (not eligible)."""
        key = tracker.key
        versions = tracker.version_strings()
        resolved_from = None

        if len(versions) == 1:
            resolved_version = versions[0]
            df_scope = {resolved_version}
        else:
            member_lists = tracker.member_lists()
            try:
                resolved = self.resolver.resolve(member_lists)
            except VersionResolutionError as e:
                logger.debug(f"Could not resolve {key.name}: {e.message}")
                conflict_types = [ConflictType.VERSION_RESOLUTION]
                if len(tracker.all_default_features()) > 1:
                    conflict_types.append(ConflictType.DEFAULT_FEATURES)
                return self._conflict(tracker, conflict_types)

            resolved_version = resolved.version
            resolved_from = member_lists
            df_scope = _matching_versions(tracker, resolved_version)

        df_values = tracker.default_features_for(df_scope)
        if len(df_values) > 1:
            logger.debug(f"default-features differ for {key.name} {resolved_version}")
            return self._conflict(tracker, [ConflictType.DEFAULT_FEATURES])

        default_features = next(iter(df_values)) if df_values else True

        if not should_consolidate(
            tracker.has_shared, tracker.distinct_member_count(), self.config.min_members
        ):
            return None

        return CommonDependency(
            name=key.name,
            version=resolved_version,
            members=tracker.members(),
            default_features=default_features,
            package=key.package,
            registry=key.registry,
            resolved_from=resolved_from,
        )

    @staticmethod
    def _conflict(
        tracker: VersionTracker, conflict_types: List[ConflictType]
    ) -> ConflictingDependency:
        return ConflictingDependency(
            name=tracker.key.name,
            version_specs=tracker.specs(),
            conflict_types=conflict_types,
            package=tracker.key.package,
            registry=tracker.key.registry,
        )

    def _claim_shared_names(
        self,
        common_deps: List[CommonDependency],
        trackers: Dict[EquivalenceKey, VersionTracker],
        data: WorkspaceData,
    ) -> Tuple[List[CommonDependency], List[ConflictingDependency]]:
        """
        Keep at most one key per name in the shared pool.

        [workspace.dependencies] has a single entry per name. If the name is
        already there, only the key matching that entry may use it. Otherwise
        a name approved for several keys is ambiguous and none of them moves.
        """
        approved: Dict[str, int] = {}
        for dep in common_deps:
            approved[dep.name] = approved.get(dep.name, 0) + 1

        kept: List[CommonDependency] = []
        conflicts: List[ConflictingDependency] = []
        for dep in common_deps:
            key = EquivalenceKey(dep.name, dep.package, dep.registry)
            existing = data.shared_deps.get(dep.name)
            if existing is not None:
                clash = existing.key != key
            else:
                clash = approved[dep.name] > 1

            if clash:
                logger.debug(f"{dep.name} is claimed by another package or registry")
                conflicts.append(self._conflict(trackers[key], [ConflictType.SHARED_NAME]))
            else:
                kept.append(dep)
        return kept, conflicts

    @staticmethod
    def _find_unused(data: WorkspaceData, common_deps: Iterable[CommonDependency]) -> List[str]:
        """Shared entries whose name is neither consolidated nor referenced."""
        used = {dep.name for dep in common_deps}
        used.update(ref.name for ref in data.workspace_refs)
        return sorted(name for name in data.shared_deps if name not in used)


def analyze_workspace(
    data: WorkspaceData,
    exclude: Optional[Iterable[str]] = None,
    min_members: int = Defaults.MIN_MEMBERS,
    strategy: ResolutionStrategy = ResolutionStrategy.HIGHEST_COMPATIBLE,
    sections: Optional[Iterable[DepSection]] = None,
) -> DependencyAnalysis:
    """
    Convenience function to analyze workspace data.

    Args:
        data: Parsed workspace data
        exclude: Dependency names never consolidated
        min_members: Members required before a new shared entry is created
        strategy: Version resolution strategy
        sections: Sections to process (defaults to all)

    Returns:
        DependencyAnalysis
    """
    config = ConsolidationConfig(
        strategy=strategy,
        min_members=min_members,
        exclude=set(exclude or ()),
        sections=list(sections) if sections is not None else list(ALL_SECTIONS),
    )
    return DependencyAnalyzer(config).analyze(data)
