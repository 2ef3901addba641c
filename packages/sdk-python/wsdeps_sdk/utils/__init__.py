"""
Utilities Module
================

Shared utilities for the wsdeps SDK:
- Workspace root detection
- Member discovery and pattern filtering
- Manifest loading
"""

from .workspace import (
    MemberInfo,
    WorkspaceInfo,
    discover_workspace,
    find_workspace_root,
    load_manifest,
)

__all__ = [
    # Workspace detection
    "find_workspace_root",
    "discover_workspace",
    "WorkspaceInfo",
    "MemberInfo",
    # Manifest loading
    "load_manifest",
]
