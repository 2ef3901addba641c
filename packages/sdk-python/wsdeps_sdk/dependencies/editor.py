"""
Manifest Rewriting
==================

Applies an analysis to Cargo.toml files with tomlkit so that comments,
ordering and whitespace of untouched entries survive.

Root manifest:
    [workspace.dependencies] gains (or updates) one entry per consolidated
    dependency. A plain string is written unless the entry needs package,
    registry, default-features = false, or keeps extra fields of an existing
    entry, in which case an inline table is used.

Member manifests:
    Each consolidated declaration becomes { workspace = true, ... } keeping
    member-owned fields such as features and optional.

An existing shared entry is never repointed: one with a different package,
registry, path or git source is an error.

Entries written as dotted tables ([dependencies.serde]) are updated in place
and stay tables.

Both functions return the new document text; writing is up to the caller.
Running them again on their own output changes nothing.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import tomlkit
from tomlkit.container import OutOfOrderTableProxy
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import AoT, InlineTable, Item, Table
from tomlkit.toml_document import TOMLDocument

from wsdeps_common.constants import Manifest
from wsdeps_common.errors import ManifestError
from wsdeps_common.logger import get_logger

from .models import CommonDependency

logger = get_logger(__name__)


def should_preserve_field(key: str) -> bool:
    """Fields not owned by the shared entry stay where they are."""
    return (
        key not in Manifest.CONSOLIDATED_FIELDS
        and key != Manifest.LEGACY_DEFAULT_FEATURES_KEY
    )


def load_document(manifest_path: Path) -> TOMLDocument:
    """
    Read a manifest as a format-preserving tomlkit document.

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    try:
        content = Path(manifest_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Failed to read {manifest_path}: {e}", path=str(manifest_path))
    try:
        return tomlkit.parse(content)
    except TOMLKitError as e:
        raise ManifestError(
            f"Failed to parse TOML at {manifest_path}: {e}", path=str(manifest_path)
        )


def _preserved_fields(existing: Item) -> List[Tuple[str, Item]]:
    """Member-owned fields of an existing inline table entry."""
    if not isinstance(existing, InlineTable):
        return []
    return [
        (key, value)
        for key, value in existing.items()
        if should_preserve_field(key) and not isinstance(value, (Table, AoT))
    ]


def _shared_entry(dep: CommonDependency, preserved: Sequence[Tuple[str, Item]]):
    """Build the [workspace.dependencies] value for one dependency."""
    needs_inline = (
        dep.package is not None
        or dep.registry is not None
        or not dep.default_features
        or bool(preserved)
    )
    if not needs_inline:
        return dep.version

    entry = tomlkit.inline_table()
    entry[Manifest.VERSION_KEY] = dep.version
    if dep.package is not None:
        entry[Manifest.PACKAGE_KEY] = dep.package
    if dep.registry is not None:
        entry[Manifest.REGISTRY_KEY] = dep.registry
    # true is Cargo's default, only false is written
    if not dep.default_features:
        entry[Manifest.DEFAULT_FEATURES_KEY] = False
    for key, value in preserved:
        entry[key] = value
    return entry


def _set_or_remove(table: Table, key: str, value) -> None:
    if value is None:
        if key in table:
            del table[key]
    else:
        table[key] = value


def _update_shared_table(table: Table, dep: CommonDependency) -> None:
    """Update a [workspace.dependencies.<name>] table in place."""
    table[Manifest.VERSION_KEY] = dep.version
    _set_or_remove(table, Manifest.PACKAGE_KEY, dep.package)
    _set_or_remove(table, Manifest.REGISTRY_KEY, dep.registry)
    _set_or_remove(table, Manifest.LEGACY_DEFAULT_FEATURES_KEY, None)
    _set_or_remove(
        table, Manifest.DEFAULT_FEATURES_KEY, None if dep.default_features else False
    )


def _convert_member_table(table: Table) -> None:
    """Turn a [dependencies.<name>] table into a workspace reference in place."""
    for key in list(table.keys()):
        if not should_preserve_field(key):
            del table[key]
    table[Manifest.WORKSPACE_KEY] = True


def _source_of(entry) -> Tuple[Optional[str], ...]:
    """(package, registry, path, git) of an existing shared entry."""
    if not isinstance(entry, (Table, InlineTable)):
        return None, None, None, None
    return tuple(
        str(entry[key]) if key in entry else None
        for key in (
            Manifest.PACKAGE_KEY,
            Manifest.REGISTRY_KEY,
            Manifest.PATH_KEY,
            Manifest.GIT_KEY,
        )
    )


def _source_of_dep(dep: CommonDependency) -> Tuple[Optional[str], ...]:
    return dep.package, dep.registry, None, None


def _ensure_table(container, key: str):
    if key not in container:
        container[key] = tomlkit.table()
    table = container[key]
    # A table split across the file comes back as a proxy
    if not isinstance(table, (Table, OutOfOrderTableProxy)):
        raise ManifestError(f"[{key}] is not a table")
    return table


def update_workspace_dependencies(
    manifest_path: Path,
    common_deps: Iterable[CommonDependency],
) -> str:
    """
    Add or update [workspace.dependencies] in the root Cargo.toml.

    Args:
        manifest_path: Root manifest
        common_deps: Dependencies to write into the shared pool

    Returns:
        Updated manifest text

    Raises:
        ManifestError: If an entry of the same name points at another
            package, registry, path or git source
    """
    doc = load_document(manifest_path)
    deps = sorted(common_deps, key=lambda d: d.name)
    if not deps:
        return doc.as_string()

    workspace = _ensure_table(doc, Manifest.WORKSPACE)
    table = _ensure_table(workspace, Manifest.DEPENDENCIES)

    for dep in deps:
        existing = table.get(dep.name)
        if existing is not None and _source_of(existing) != _source_of_dep(dep):
            raise ManifestError(
                f"Refusing to overwrite [workspace.dependencies] {dep.name}: "
                f"the existing entry uses a different source",
                path=str(manifest_path),
            )
        if isinstance(existing, Table):
            _update_shared_table(existing, dep)
        else:
            preserved = _preserved_fields(existing) if existing is not None else []
            table[dep.name] = _shared_entry(dep, preserved)
        logger.debug(f"workspace.dependencies: {dep.name} = {dep.version}")

    return doc.as_string()


def update_member_dependencies(
    manifest_path: Path,
    common_deps: Iterable[CommonDependency],
    member_name: str,
) -> str:
    """
    Point a member's consolidated declarations at the shared pool.

    Args:
        manifest_path: Member manifest
        common_deps: Analysis result
        member_name: Name of the member owning manifest_path

    Returns:
        Updated manifest text (unchanged when nothing applies)
    """
    doc = load_document(manifest_path)

    for dep in common_deps:
        for section in dep.sections_for(member_name):
            section_table = doc.get(section.value)
            if not isinstance(section_table, (Table, InlineTable, OutOfOrderTableProxy)):
                continue
            existing = section_table.get(dep.name)
            if existing is None:
                continue

            if isinstance(existing, Table):
                _convert_member_table(existing)
            else:
                entry = tomlkit.inline_table()
                entry[Manifest.WORKSPACE_KEY] = True
                for key, value in _preserved_fields(existing):
                    entry[key] = value
                section_table[dep.name] = entry
            logger.debug(f"{member_name} [{section.value}]: {dep.name} -> workspace")

    return doc.as_string()
