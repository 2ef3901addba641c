"""
Dependency Data Model
=====================

Records flowing through the consolidation engine:

    DeclarationRecord / SharedDeclaration / WorkspaceRef  (extraction output)
        -> EquivalenceKey + VersionTracker                 (grouping)
        -> CommonDependency / ConflictingDependency        (analysis output)

Extraction records are immutable. Result records are plain dataclasses that
the analyzer sorts before handing them to rewriting or rendering.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class DepSection(str, Enum):
    """Manifest dependency sections the engine can process."""

    DEPENDENCIES = "dependencies"
    DEV_DEPENDENCIES = "dev-dependencies"
    BUILD_DEPENDENCIES = "build-dependencies"

    @property
    def order(self) -> int:
        """Position used when sorting results by section."""
        return _SECTION_ORDER.index(self)

    @classmethod
    def from_value(cls, value: str) -> "DepSection":
        """Accept both dashed and underscored spellings."""
        return cls(value.replace("_", "-"))


_SECTION_ORDER = [
    DepSection.DEPENDENCIES,
    DepSection.DEV_DEPENDENCIES,
    DepSection.BUILD_DEPENDENCIES,
]

ALL_SECTIONS = tuple(_SECTION_ORDER)


class ConflictType(str, Enum):
    """Why a dependency could not be consolidated."""

    VERSION_RESOLUTION = "version_resolution"
    DEFAULT_FEATURES = "default_features"
    # Another key with the same name holds or competes for the shared entry
    SHARED_NAME = "shared_name"


@dataclass(frozen=True)
class EquivalenceKey:
    """
    Identity of "the same dependency" across members and sections.

    Declarations with the same name but a different renamed package or
    registry are different keys and never merge. default-features is not
    part of the key so that disagreement on it can be detected.
    """

    name: str
    package: Optional[str] = None
    registry: Optional[str] = None

    def sort_key(self) -> tuple:
        return (self.name, self.package or "", self.registry or "")


@dataclass(frozen=True)
class DeclarationRecord:
    """
    One dependency entry from one member manifest section.

    default_features is already normalized: an absent flag is True.
    """

    name: str
    version: str
    section: DepSection
    package: Optional[str] = None
    registry: Optional[str] = None
    default_features: bool = True

    @property
    def key(self) -> EquivalenceKey:
        return EquivalenceKey(self.name, self.package, self.registry)


@dataclass(frozen=True)
class SharedDeclaration:
    """An entry of the root [workspace.dependencies] table."""

    name: str
    version: str
    package: Optional[str] = None
    registry: Optional[str] = None
    default_features: bool = True

    @property
    def key(self) -> EquivalenceKey:
        return EquivalenceKey(self.name, self.package, self.registry)


@dataclass(frozen=True)
class WorkspaceRef:
    """A member declaration already written as { workspace = true }."""

    name: str
    section: DepSection


@dataclass(frozen=True)
class MemberUse:
    """One member using a dependency in one section."""

    member: str
    section: DepSection

    def sort_key(self) -> tuple:
        return (self.member, self.section.order)


@dataclass
class WorkspaceData:
    """All parsed dependency data from the workspace root and its members."""

    shared_deps: Dict[str, SharedDeclaration] = field(default_factory=dict)
    member_deps: Dict[str, List[DeclarationRecord]] = field(default_factory=dict)
    workspace_refs: List[WorkspaceRef] = field(default_factory=list)


@dataclass
class CommonDependency:
    """A dependency that will be (or already is) served from the shared pool."""

    name: str
    version: str
    # Members that need their entry converted to { workspace = true }
    members: List[MemberUse]
    default_features: bool = True
    # Renamed package (serde_crate = { package = "serde", ... })
    package: Optional[str] = None
    # Custom registry for private crates
    registry: Optional[str] = None
    # None = single version; otherwise original version -> member names
    resolved_from: Optional[Dict[str, List[str]]] = None

    @property
    def member_names(self) -> List[str]:
        """Distinct member names, sorted."""
        return sorted({use.member for use in self.members})

    def sections_for(self, member: str) -> List[DepSection]:
        """Sections in which the given member declares this dependency."""
        return [use.section for use in self.members if use.member == member]


@dataclass
class VersionSpec:
    """One distinct (version, default-features) pair observed for a key."""

    version: str
    default_features: bool
    members: List[MemberUse] = field(default_factory=list)
    in_workspace: bool = False


@dataclass
class ConflictingDependency:
    """A dependency whose declarations cannot share one entry."""

    name: str
    version_specs: List[VersionSpec]
    conflict_types: List[ConflictType]
    package: Optional[str] = None
    registry: Optional[str] = None


@dataclass
class DependencyAnalysis:
    """Engine output consumed by manifest rewriting and report rendering."""

    common_deps: List[CommonDependency] = field(default_factory=list)
    conflicts: List[ConflictingDependency] = field(default_factory=list)
    unused_workspace_deps: List[str] = field(default_factory=list)

    @property
    def resolved_count(self) -> int:
        """Number of consolidated dependencies that needed version resolution."""
        return sum(1 for dep in self.common_deps if dep.resolved_from is not None)
