"""
wsdeps Consolidation Run
========================

Drives one consolidation pass over a Cargo workspace:

1. Discover the workspace and drop members excluded by pattern
2. Extract declarations from the selected sections
3. Analyze (group, resolve, reconcile, decide)
4. Render the report as text or JSON
5. In check mode, fail if anything could still be consolidated or conflicts
6. Otherwise confirm (unless fix) and rewrite the manifests

Output goes through a callback so the same run can print to a terminal or be
captured by tests and other tools.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel, field_validator, model_validator

from wsdeps_common.constants import OUTPUT_FORMATS, Defaults
from wsdeps_common.errors import CheckFailedError, ManifestError, ValidationError
from wsdeps_common.logger import get_logger

from .dependencies.analyzer import ConsolidationConfig, DependencyAnalyzer
from .dependencies.editor import update_member_dependencies, update_workspace_dependencies
from .dependencies.models import DependencyAnalysis, DepSection
from .dependencies.parser import parse_workspace_data
from .dependencies.resolver import ResolutionStrategy
from .report import Report
from .utils.workspace import discover_workspace

logger = get_logger(__name__)

OutputFn = Callable[[str], None]
ConfirmFn = Callable[[], bool]

CONFIRM_PROMPT = "Apply these changes? [y/N] "


class ConsolidateOptions(BaseModel):
    """Options for a consolidation run."""

    fix: bool = False
    check: bool = False
    manifest_path: Optional[Path] = None
    process_dependencies: bool = True
    process_dev_dependencies: bool = True
    process_build_dependencies: bool = True
    exclude: List[str] = []
    exclude_members: List[str] = []
    min_members: int = Defaults.MIN_MEMBERS
    strategy: ResolutionStrategy = ResolutionStrategy(Defaults.STRATEGY)
    output_format: str = Defaults.OUTPUT_FORMAT

    @field_validator("min_members")
    @classmethod
    def validate_min_members(cls, v: int) -> int:
        if v < 1:
            raise ValidationError(f"min_members must be at least 1, got {v}")
        return v

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        v = v.lower()
        if v not in OUTPUT_FORMATS:
            raise ValidationError(
                f"Unsupported output format '{v}'. Supported: {', '.join(OUTPUT_FORMATS)}"
            )
        return v

    @model_validator(mode="after")
    def validate_json_is_non_interactive(self) -> "ConsolidateOptions":
        if self.output_format == "json" and not (self.fix or self.check):
            raise ValidationError(
                "JSON output requires --fix or --check flag (non-interactive mode)"
            )
        return self

    @property
    def is_text(self) -> bool:
        return self.output_format == "text"

    @property
    def sections(self) -> List[DepSection]:
        """Sections enabled for processing, in manifest order."""
        flags = [
            (self.process_dependencies, DepSection.DEPENDENCIES),
            (self.process_dev_dependencies, DepSection.DEV_DEPENDENCIES),
            (self.process_build_dependencies, DepSection.BUILD_DEPENDENCIES),
        ]
        return [section for enabled, section in flags if enabled]


@dataclass
class ConsolidateResult:
    """What a run found and did."""

    analysis: Optional[DependencyAnalysis] = None
    report: Optional[Report] = None
    applied: bool = False
    changed_files: List[Path] = field(default_factory=list)


def _stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _confirm_from_stdin() -> bool:
    answer = sys.stdin.readline().strip().lower()
    return answer in ("y", "yes")


def run(
    options: ConsolidateOptions,
    output: Optional[OutputFn] = None,
    confirm: Optional[ConfirmFn] = None,
) -> ConsolidateResult:
    """
    Run one consolidation pass.

    Args:
        options: Run options
        output: Receives every piece of output text (defaults to stdout)
        confirm: Asked after the prompt is written; True applies the changes
            (defaults to reading a y/yes answer from stdin)

    Returns:
        ConsolidateResult

    Raises:
        CheckFailedError: In check mode when consolidations or conflicts remain
        WorkspaceError: If the workspace cannot be discovered
        ManifestError: If a manifest cannot be read, parsed or written
    """
    write = output or _stdout
    ask = confirm or _confirm_from_stdin
    result = ConsolidateResult()

    workspace = discover_workspace(options.manifest_path)
    filtered = workspace.filter_members_by_patterns(options.exclude_members)

    if options.is_text:
        if filtered:
            write(f"Found {len(workspace.members)} members ({filtered} excluded by pattern)\n")
        else:
            write(f"Found {len(workspace.members)} members\n")

    sections = options.sections
    if not sections:
        if options.is_text:
            write("No dependency sections selected for processing.\n")
        return result

    data = parse_workspace_data(workspace, sections)
    config = ConsolidationConfig(
        strategy=options.strategy,
        min_members=options.min_members,
        exclude=set(options.exclude),
        sections=sections,
    )
    analysis = DependencyAnalyzer(config).analyze(data)
    report = Report.from_analysis(analysis, str(workspace.root), len(workspace.members))
    result.analysis = analysis
    result.report = report

    if options.is_text:
        write(report.to_text(options.strategy))

    if options.check:
        return _check(options, analysis, report, write, result)

    if not analysis.common_deps:
        if not options.is_text:
            write(report.to_json())
        return result

    if not options.fix:
        write(CONFIRM_PROMPT)
        if not ask():
            write("Cancelled.\n")
            return result
        write("\n")

    if options.is_text:
        write("Updating workspace Cargo.toml...\n")

    result.changed_files = _apply(workspace, analysis)
    result.applied = True
    logger.info(f"Consolidated {len(analysis.common_deps)} dependencies")

    if options.is_text:
        write(f"Consolidated {len(analysis.common_deps)} dependencies\n")
    else:
        write(report.to_json())
    return result


def _check(
    options: ConsolidateOptions,
    analysis: DependencyAnalysis,
    report: Report,
    write: OutputFn,
    result: ConsolidateResult,
) -> ConsolidateResult:
    """Check mode: consolidations fail first, then conflicts."""
    if not options.is_text:
        write(report.to_json())

    if analysis.common_deps:
        error = CheckFailedError(CheckFailedError.CONSOLIDATION, len(analysis.common_deps))
    elif analysis.conflicts:
        error = CheckFailedError(CheckFailedError.CONFLICTS, len(analysis.conflicts))
    else:
        if options.is_text:
            write("Check passed: no dependencies to consolidate\n")
        return result

    if options.is_text:
        write(f"{error.message}\n")
    raise error


def _write_manifest(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Failed to write {path}: {e}", path=str(path))


def _apply(workspace, analysis: DependencyAnalysis) -> List[Path]:
    """Rewrite the root manifest and every member whose content changes."""
    changed: List[Path] = []

    root_content = update_workspace_dependencies(workspace.root_manifest, analysis.common_deps)
    _write_manifest(workspace.root_manifest, root_content)
    changed.append(workspace.root_manifest)

    for member in workspace.members:
        # A root package shares its manifest with the workspace table
        member_content = update_member_dependencies(
            member.manifest_path, analysis.common_deps, member.name
        )
        original = member.manifest_path.read_text(encoding="utf-8")
        if original != member_content:
            _write_manifest(member.manifest_path, member_content)
            if member.manifest_path not in changed:
                changed.append(member.manifest_path)

    return changed
