"""
Workspace Utilities Module
==========================

Provides utilities for finding and working with a Cargo workspace:
- Finding the workspace root (first Cargo.toml with a [workspace] table)
- Loading manifests
- Expanding [workspace] members globs into member manifests
- Excluding members by name pattern
"""

import fnmatch
import tomllib  # Python 3.11+ built-in
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from wsdeps_common.constants import Manifest
from wsdeps_common.errors import ManifestError, WorkspaceError
from wsdeps_common.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Data Types
# ============================================================================


@dataclass
class MemberInfo:
    """One workspace member."""

    name: str
    manifest_path: Path


@dataclass
class WorkspaceInfo:
    """Workspace root manifest and its members."""

    root_manifest: Path
    members: List[MemberInfo] = field(default_factory=list)

    @property
    def root(self) -> Path:
        return self.root_manifest.parent

    def filter_members_by_patterns(self, patterns: Iterable[str]) -> int:
        """
        Drop members whose name matches any glob pattern.

        Args:
            patterns: Glob patterns such as "submodules/*" or "*-sys"

        Returns:
            Number of members removed
        """
        patterns = [p for p in patterns if p]
        if not patterns:
            return 0

        original_count = len(self.members)
        self.members = [
            member
            for member in self.members
            if not any(fnmatch.fnmatchcase(member.name, pattern) for pattern in patterns)
        ]
        removed = original_count - len(self.members)
        if removed:
            logger.debug(f"Excluded {removed} members by pattern {patterns}")
        return removed


# ============================================================================
# Manifest Loading
# ============================================================================


def load_manifest(path: Path) -> Dict[str, Any]:
    """
    Read and parse a Cargo.toml.

    Raises:
        ManifestError: If the file cannot be read or is not valid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        raise ManifestError(f"Failed to read {path}: file not found", path=str(path))
    except OSError as e:
        raise ManifestError(f"Failed to read {path}: {e}", path=str(path))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Failed to parse TOML at {path}: {e}", path=str(path))


# ============================================================================
# Workspace Detection
# ============================================================================


def find_workspace_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find the workspace root.

    Walks up the directory tree from start_path looking for a Cargo.toml
    that declares a [workspace] table.

    Args:
        start_path: Starting directory (defaults to current working directory)

    Returns:
        Path to the workspace root directory, or None if not found
    """
    current = (start_path or Path.cwd()).resolve()

    for parent in [current] + list(current.parents):
        manifest = parent / Manifest.FILE_NAME
        if not manifest.is_file():
            continue
        try:
            data = load_manifest(manifest)
        except ManifestError as e:
            logger.warning(f"Skipping unreadable manifest while searching: {e.message}")
            continue
        if Manifest.WORKSPACE in data:
            return parent

    return None


def _expand_member_globs(root: Path, patterns: Iterable[str]) -> List[Path]:
    """Expand [workspace] members entries to directories holding a Cargo.toml."""
    found: List[Path] = []
    for pattern in patterns:
        pattern = pattern.rstrip("/")
        candidates = [root] if pattern in ("", ".") else sorted(root.glob(pattern))
        if not candidates:
            logger.warning(f"Workspace member pattern '{pattern}' matched nothing")
        for candidate in candidates:
            if (candidate / Manifest.FILE_NAME).is_file() and candidate.resolve() not in found:
                found.append(candidate.resolve())
    return found


def _member_name(directory: Path, manifest: Dict[str, Any]) -> str:
    package = manifest.get(Manifest.PACKAGE)
    if isinstance(package, dict) and isinstance(package.get("name"), str):
        return package["name"]
    return directory.name


def discover_workspace(workspace_path: Optional[Path] = None) -> WorkspaceInfo:
    """
    Discover the workspace structure from the root manifest.

    Args:
        workspace_path: Workspace directory or a Cargo.toml inside it
            (defaults to current working directory)

    Returns:
        WorkspaceInfo with the root manifest and all members

    Raises:
        WorkspaceError: If no workspace or no members are found
    """
    start = Path(workspace_path) if workspace_path else Path.cwd()
    if start.name == Manifest.FILE_NAME:
        start = start.parent

    root = find_workspace_root(start)
    if root is None:
        raise WorkspaceError(
            f"Could not find a {Manifest.FILE_NAME} with a [workspace] table in {start} "
            "or any parent directory"
        )

    root_manifest = root / Manifest.FILE_NAME
    root_data = load_manifest(root_manifest)
    workspace_table = root_data.get(Manifest.WORKSPACE, {})

    member_dirs = _expand_member_globs(root, workspace_table.get(Manifest.MEMBERS, []))
    excluded = {(root / p).resolve() for p in workspace_table.get(Manifest.EXCLUDE, [])}

    # A root manifest with [package] is itself a member
    if Manifest.PACKAGE in root_data and root.resolve() not in member_dirs:
        member_dirs.insert(0, root.resolve())

    members: List[MemberInfo] = []
    for directory in member_dirs:
        if directory in excluded:
            logger.debug(f"Skipping excluded workspace path {directory}")
            continue
        manifest_path = directory / Manifest.FILE_NAME
        data = root_data if directory == root.resolve() else load_manifest(manifest_path)
        members.append(MemberInfo(name=_member_name(directory, data), manifest_path=manifest_path))

    if not members:
        raise WorkspaceError("No workspace members found. Is this a workspace?")

    logger.info(f"Discovered {len(members)} workspace members under {root}")
    return WorkspaceInfo(root_manifest=root_manifest, members=members)
