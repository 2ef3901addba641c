"""
wsdeps Dependency Consolidation
===============================

Provides utilities for:
- Parsing Cargo.toml dependency sections into declaration records
- Lenient semantic version parsing and Cargo-style requirement matching
- Grouping declarations and resolving version conflicts
- Analyzing which dependencies can move to [workspace.dependencies]
- Rewriting manifests while preserving formatting

Per-dependency failures never abort an analysis; they are reported as
conflicts next to the dependencies that could be consolidated.
"""

from .analyzer import (
    ConsolidationConfig,
    DependencyAnalyzer,
    analyze_workspace,
    should_consolidate,
)
from .editor import update_member_dependencies, update_workspace_dependencies
from .models import (
    ALL_SECTIONS,
    CommonDependency,
    ConflictingDependency,
    ConflictType,
    DeclarationRecord,
    DependencyAnalysis,
    DepSection,
    EquivalenceKey,
    MemberUse,
    SharedDeclaration,
    VersionSpec,
    WorkspaceData,
    WorkspaceRef,
)
from .parser import (
    parse_dependencies,
    parse_manifest_dependencies,
    parse_workspace_data,
    parse_workspace_dependencies,
)
from .resolver import (
    ResolutionStrategy,
    ResolvedVersion,
    VersionResolver,
    resolve_version_conflict,
)
from .tracker import VersionTracker, group_declarations
from .version import (
    Version,
    VersionReq,
    parse_version,
    parse_version_lenient,
    parse_version_req,
)

__all__ = [
    # Version utilities
    "Version",
    "VersionReq",
    "parse_version",
    "parse_version_lenient",
    "parse_version_req",
    # Data model
    "ALL_SECTIONS",
    "DepSection",
    "DeclarationRecord",
    "SharedDeclaration",
    "WorkspaceRef",
    "WorkspaceData",
    "EquivalenceKey",
    "MemberUse",
    "CommonDependency",
    "ConflictingDependency",
    "ConflictType",
    "VersionSpec",
    "DependencyAnalysis",
    # Parsing
    "parse_dependencies",
    "parse_manifest_dependencies",
    "parse_workspace_dependencies",
    "parse_workspace_data",
    # Grouping and resolution
    "VersionTracker",
    "group_declarations",
    "ResolutionStrategy",
    "ResolvedVersion",
    "VersionResolver",
    "resolve_version_conflict",
    # Analysis
    "ConsolidationConfig",
    "DependencyAnalyzer",
    "analyze_workspace",
    "should_consolidate",
    # Rewriting
    "update_workspace_dependencies",
    "update_member_dependencies",
]
