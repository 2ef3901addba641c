"""
Manifest Dependency Parsing
===========================

Turns Cargo.toml dependency sections into engine records.

Handles the dependency spec forms Cargo accepts:
- Simple: serde = "1.0"
- Inline table: serde = { version = "1.0", features = ["derive"] }
- Dotted table: [dependencies.serde] with version = "1.0"
- Shared pool reference: serde = { workspace = true }

Specs with a path or git source, and specs without a version, are skipped.
An absent default-features flag is normalized to True here so later stages
only ever compare explicit booleans.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from wsdeps_common.constants import Manifest
from wsdeps_common.logger import get_logger

from ..utils.workspace import WorkspaceInfo, load_manifest
from .models import (
    ALL_SECTIONS,
    DeclarationRecord,
    DepSection,
    SharedDeclaration,
    WorkspaceData,
    WorkspaceRef,
)

logger = get_logger(__name__)

# (version, package, registry, default_features)
SpecFields = Tuple[Optional[str], Optional[str], Optional[str], bool]


def _optional_str(table: Dict[str, Any], key: str) -> Optional[str]:
    value = table.get(key)
    return value if isinstance(value, str) else None


def _default_features(table: Dict[str, Any]) -> bool:
    for key in (Manifest.DEFAULT_FEATURES_KEY, Manifest.LEGACY_DEFAULT_FEATURES_KEY):
        value = table.get(key)
        if isinstance(value, bool):
            return value
    return True


def extract_spec_fields(spec: Any) -> Optional[SpecFields]:
    """
    Pull the consolidation-relevant fields out of one dependency spec.

    Returns:
        (version, package, registry, default_features), or None when the
        spec points at a path or git source or is not a string/table
    """
    if isinstance(spec, str):
        return spec, None, None, True
    if not isinstance(spec, dict):
        return None
    if Manifest.PATH_KEY in spec or Manifest.GIT_KEY in spec:
        return None
    return (
        _optional_str(spec, Manifest.VERSION_KEY),
        _optional_str(spec, Manifest.PACKAGE_KEY),
        _optional_str(spec, Manifest.REGISTRY_KEY),
        _default_features(spec),
    )


def uses_shared_pool(spec: Any) -> bool:
    """True for { workspace = true } style specs."""
    return isinstance(spec, dict) and Manifest.WORKSPACE_KEY in spec


def parse_manifest_dependencies(
    manifest: Dict[str, Any],
    sections: Iterable[DepSection] = ALL_SECTIONS,
) -> Tuple[List[DeclarationRecord], List[WorkspaceRef]]:
    """
    Extract declarations from an already loaded manifest.

    Returns:
        (records with explicit versions, references to the shared pool)
    """
    records: List[DeclarationRecord] = []
    refs: List[WorkspaceRef] = []

    for section in sections:
        table = manifest.get(section.value)
        if not isinstance(table, dict):
            continue

        for name, spec in table.items():
            if uses_shared_pool(spec):
                refs.append(WorkspaceRef(name=name, section=section))
                continue

            if not isinstance(spec, (str, dict)):
                logger.debug(f"Skipping {name} in [{section.value}]: unsupported spec")
                continue

            fields = extract_spec_fields(spec)
            if fields is None:
                logger.debug(f"Skipping {name} in [{section.value}]: path or git source")
                continue

            version, package, registry, default_features = fields
            if version is None:
                logger.debug(f"Skipping {name} in [{section.value}]: no version")
                continue

            records.append(
                DeclarationRecord(
                    name=name,
                    version=version,
                    section=section,
                    package=package,
                    registry=registry,
                    default_features=default_features,
                )
            )

    return records, refs


def parse_dependencies(
    manifest_path: Path,
    sections: Iterable[DepSection] = ALL_SECTIONS,
) -> Tuple[List[DeclarationRecord], List[WorkspaceRef]]:
    """
    Parse dependencies from a member Cargo.toml.

    Args:
        manifest_path: Path to the member manifest
        sections: Sections to read

    Returns:
        (records with explicit versions, references to the shared pool)

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    return parse_manifest_dependencies(load_manifest(manifest_path), sections)


def parse_workspace_dependencies(workspace_manifest: Path) -> Dict[str, SharedDeclaration]:
    """
    Parse [workspace.dependencies] from the root Cargo.toml.

    Entries without a version (path or git sources) are skipped.

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    manifest = load_manifest(workspace_manifest)
    workspace = manifest.get(Manifest.WORKSPACE)
    if not isinstance(workspace, dict):
        return {}

    table = workspace.get(Manifest.DEPENDENCIES)
    if not isinstance(table, dict):
        return {}

    shared: Dict[str, SharedDeclaration] = {}
    for name, spec in table.items():
        fields = extract_spec_fields(spec)
        if fields is None or fields[0] is None:
            continue
        version, package, registry, default_features = fields
        shared[name] = SharedDeclaration(
            name=name,
            version=version,
            package=package,
            registry=registry,
            default_features=default_features,
        )
    return shared


def parse_workspace_data(
    workspace_info: WorkspaceInfo,
    sections: Iterable[DepSection] = ALL_SECTIONS,
) -> WorkspaceData:
    """
    Parse all workspace data (shared pool + member declarations).

    Args:
        workspace_info: Discovered workspace
        sections: Sections to read from each member

    Returns:
        WorkspaceData ready for analysis
    """
    sections = list(sections)
    shared_deps = parse_workspace_dependencies(workspace_info.root_manifest)

    member_deps: Dict[str, List[DeclarationRecord]] = {}
    workspace_refs: List[WorkspaceRef] = []

    for member in workspace_info.members:
        records, refs = parse_dependencies(member.manifest_path, sections)
        if records:
            member_deps.setdefault(member.name, []).extend(records)
        workspace_refs.extend(refs)

    logger.debug(
        f"Parsed {len(shared_deps)} shared entries, "
        f"{sum(len(r) for r in member_deps.values())} member declarations, "
        f"{len(workspace_refs)} workspace references"
    )
    return WorkspaceData(
        shared_deps=shared_deps,
        member_deps=member_deps,
        workspace_refs=workspace_refs,
    )
