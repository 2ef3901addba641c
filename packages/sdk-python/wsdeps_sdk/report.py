"""
Consolidation Report
====================

Structured view of a DependencyAnalysis for output. The same Report model is
rendered as human readable text or serialized to JSON; neither path changes
any decision made by the analyzer.

JSON layout (schema version "1"):
    {
      "version": "1",
      "workspace": {"root": "...", "member_count": 3},
      "summary": {...counts...},
      "common_dependencies": [...],
      "conflicts": [...],
      "unused_workspace_dependencies": [...]
    }

Optional fields that are not set are omitted from JSON.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel

from wsdeps_common.constants import OUTPUT_SCHEMA_VERSION, SHARED_POOL_MARKER

from .dependencies.models import (
    CommonDependency,
    ConflictingDependency,
    ConflictType,
    DependencyAnalysis,
    VersionSpec,
)
from .dependencies.resolver import ResolutionStrategy

_CONFLICT_REASONS = {
    ConflictType.VERSION_RESOLUTION: "version resolution",
    ConflictType.DEFAULT_FEATURES: "default-features differ",
    ConflictType.SHARED_NAME: "name shared with another package or registry",
}


class WorkspaceSummary(BaseModel):
    root: str
    member_count: int


class Summary(BaseModel):
    dependencies_to_consolidate: int = 0
    conflicts_resolved: int = 0
    conflicts_unresolved: int = 0
    unused_workspace_deps: int = 0


class DependencyOut(BaseModel):
    """A dependency moving to (or already in) the shared pool."""

    name: str
    version: str
    sections: List[str]
    members: List[str]
    package: Optional[str] = None
    registry: Optional[str] = None
    default_features: bool = True
    resolved_from: Optional[Dict[str, List[str]]] = None

    @classmethod
    def from_common(cls, dep: CommonDependency) -> "DependencyOut":
        sections = sorted({use.section for use in dep.members}, key=lambda s: s.order)
        return cls(
            name=dep.name,
            version=dep.version,
            sections=[s.value for s in sections],
            members=dep.member_names,
            package=dep.package,
            registry=dep.registry,
            default_features=dep.default_features,
            resolved_from=dep.resolved_from,
        )


class VersionSpecOut(BaseModel):
    version: str
    default_features: bool
    members: List[str]

    @classmethod
    def from_spec(cls, spec: VersionSpec) -> "VersionSpecOut":
        members = sorted({use.member for use in spec.members})
        if spec.in_workspace:
            members.append(SHARED_POOL_MARKER)
        return cls(version=spec.version, default_features=spec.default_features, members=members)


class ConflictOut(BaseModel):
    name: str
    package: Optional[str] = None
    registry: Optional[str] = None
    version_specs: List[VersionSpecOut]
    conflict_types: List[ConflictType]

    @classmethod
    def from_conflict(cls, conflict: ConflictingDependency) -> "ConflictOut":
        return cls(
            name=conflict.name,
            package=conflict.package,
            registry=conflict.registry,
            version_specs=[VersionSpecOut.from_spec(s) for s in conflict.version_specs],
            conflict_types=list(conflict.conflict_types),
        )


class Report(BaseModel):
    """Everything a run has to say about a workspace."""

    version: str = OUTPUT_SCHEMA_VERSION
    workspace: WorkspaceSummary
    summary: Summary
    common_dependencies: List[DependencyOut] = []
    conflicts: List[ConflictOut] = []
    unused_workspace_dependencies: List[str] = []

    @classmethod
    def from_analysis(
        cls, analysis: DependencyAnalysis, workspace_root: str, member_count: int
    ) -> "Report":
        return cls(
            workspace=WorkspaceSummary(root=workspace_root, member_count=member_count),
            summary=Summary(
                dependencies_to_consolidate=len(analysis.common_deps),
                conflicts_resolved=analysis.resolved_count,
                conflicts_unresolved=len(analysis.conflicts),
                unused_workspace_deps=len(analysis.unused_workspace_deps),
            ),
            common_dependencies=[DependencyOut.from_common(d) for d in analysis.common_deps],
            conflicts=[ConflictOut.from_conflict(c) for c in analysis.conflicts],
            unused_workspace_dependencies=list(analysis.unused_workspace_deps),
        )

    def to_json(self) -> str:
        """Serialize to pretty JSON with a trailing newline."""
        return self.model_dump_json(indent=2, exclude_none=True) + "\n"

    def to_text(self, strategy: ResolutionStrategy) -> str:
        """Format as human readable text."""
        lines: List[str] = ["", "Summary:"]
        summary = self.summary
        lines.append(f"  {summary.dependencies_to_consolidate} dependencies to consolidate")
        if summary.conflicts_resolved:
            lines.append(f"  {summary.conflicts_resolved} version conflicts resolved")
        if summary.conflicts_unresolved:
            lines.append(f"  {summary.conflicts_unresolved} conflicts could not resolve")
        if summary.unused_workspace_deps:
            lines.append(f"  {summary.unused_workspace_deps} unused workspace dependencies")
        lines.append("")

        if self.common_dependencies:
            lines.append("Will consolidate:")
            for dep in self.common_dependencies:
                lines.append(f'  {dep.name} = "{dep.version}" in: {", ".join(dep.members)}')
            lines.append("")

            resolved = [d for d in self.common_dependencies if d.resolved_from is not None]
            if resolved:
                lines.append(f"Resolved conflicts (using {strategy.label}):")
                for dep in resolved:
                    originals = ", ".join(sorted(dep.resolved_from))
                    lines.append(f"  {dep.name}: {originals} → {dep.version}")
                lines.append("")
        else:
            lines.append("No dependencies to consolidate.")
            lines.append("")

        if self.conflicts:
            lines.append("Could not resolve:")
            for conflict in self.conflicts:
                reason = ", ".join(_CONFLICT_REASONS[t] for t in conflict.conflict_types)
                lines.append(f"  {conflict.name} ({reason}):")
                for spec in conflict.version_specs:
                    if not spec.members:
                        continue
                    flag = "true" if spec.default_features else "false"
                    lines.append(
                        f"    {spec.version} (default-features={flag}) "
                        f"in: {', '.join(spec.members)}"
                    )
            lines.append("")

        if self.unused_workspace_dependencies:
            lines.append("Unused workspace dependencies:")
            for name in self.unused_workspace_dependencies:
                lines.append(f"  {name}")
            lines.append("")

        return "\n".join(lines) + "\n"
