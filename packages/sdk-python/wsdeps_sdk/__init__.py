"""wsdeps SDK - consolidate Cargo workspace dependencies.

This package provides tools for:
- Discovering a Cargo workspace and its members
- Extracting dependency declarations from member manifests
- Deciding which dependencies can share one [workspace.dependencies] entry
- Resolving version disagreement under a chosen strategy
- Rewriting manifests while keeping their formatting

Example:
    >>> from wsdeps_sdk import ConsolidateOptions, run
    >>> result = run(ConsolidateOptions(check=True, manifest_path="path/to/workspace"))

Package Structure:
    wsdeps_sdk/
    ├── dependencies/   - Parsing, version handling, analysis, rewriting
    ├── utils/          - Workspace discovery
    ├── report.py       - Text and JSON rendering
    └── consolidate.py  - One full consolidation run
"""

from wsdeps_common.constants import WSDEPS_VERSION

from .consolidate import ConsolidateOptions, ConsolidateResult, run
from .dependencies import (
    CommonDependency,
    ConflictingDependency,
    ConsolidationConfig,
    DependencyAnalysis,
    DependencyAnalyzer,
    DepSection,
    ResolutionStrategy,
    analyze_workspace,
    parse_workspace_data,
    resolve_version_conflict,
)
from .report import Report
from .utils import MemberInfo, WorkspaceInfo, discover_workspace, find_workspace_root

__version__ = WSDEPS_VERSION

__all__ = [
    # Running
    "ConsolidateOptions",
    "ConsolidateResult",
    "run",
    # Analysis
    "ConsolidationConfig",
    "DependencyAnalyzer",
    "DependencyAnalysis",
    "CommonDependency",
    "ConflictingDependency",
    "DepSection",
    "ResolutionStrategy",
    "analyze_workspace",
    "parse_workspace_data",
    "resolve_version_conflict",
    # Reporting
    "Report",
    # Workspace
    "WorkspaceInfo",
    "MemberInfo",
    "discover_workspace",
    "find_workspace_root",
]
