"""Consolidate command - Move shared dependencies to [workspace.dependencies]."""

from pathlib import Path
from typing import List, Optional

import typer

from wsdeps_common.constants import Defaults
from wsdeps_common.errors import CheckFailedError
from wsdeps_common.logger import configure_logging
from wsdeps_sdk.consolidate import ConsolidateOptions, run
from wsdeps_sdk.dependencies.resolver import ResolutionStrategy

from .utils import handle_error, info


def _split_csv(values: Optional[List[str]]) -> List[str]:
    """Accept both repeated flags and comma-separated values."""
    result: List[str] = []
    for value in values or []:
        result.extend(part.strip() for part in value.split(",") if part.strip())
    return result


def _echo(text: str) -> None:
    typer.echo(text, nl=False)


def consolidate(
    fix: bool = typer.Option(
        False, "--fix", help="Apply changes without prompting for confirmation"
    ),
    check: bool = typer.Option(
        False, "--check", help="Exit with an error if changes are needed (useful for CI)"
    ),
    manifest_path: Optional[Path] = typer.Option(
        None,
        "--manifest-path",
        metavar="PATH",
        help="Path to workspace directory (defaults to current directory)",
    ),
    no_dependencies: bool = typer.Option(
        False, "--no-dependencies", help="Skip processing [dependencies]"
    ),
    no_dev_dependencies: bool = typer.Option(
        False, "--no-dev-dependencies", help="Skip processing [dev-dependencies]"
    ),
    no_build_dependencies: bool = typer.Option(
        False, "--no-build-dependencies", help="Skip processing [build-dependencies]"
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", help="Skip dependencies by name (comma-separated, e.g. serde,tokio)"
    ),
    exclude_members: Optional[List[str]] = typer.Option(
        None,
        "--exclude-members",
        help="Skip workspace members by glob pattern (comma-separated, e.g. 'submodules/*')",
    ),
    min_members: int = typer.Option(
        Defaults.MIN_MEMBERS,
        "--min-members",
        help="Only consolidate dependencies appearing in at least N members",
    ),
    version_resolution: ResolutionStrategy = typer.Option(
        ResolutionStrategy.HIGHEST_COMPATIBLE,
        "--version-resolution",
        case_sensitive=False,
        help="Strategy for resolving version conflicts",
    ),
    output_format: str = typer.Option(
        Defaults.OUTPUT_FORMAT, "--format", help="Output format: text or json"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs and tracebacks"),
):
    """
    Consolidate common dependencies into [workspace.dependencies].

    Moves dependencies shared by several members to the workspace root and
    rewrites members to use { workspace = true }. Version disagreement is
    resolved with the chosen strategy; anything that cannot be reconciled is
    reported and left alone.

    Examples:
        wsdeps consolidate
        wsdeps consolidate --fix --version-resolution highest
        wsdeps consolidate --check --format json
        wsdeps consolidate --exclude tokio --exclude-members 'vendor/*'
    """
    configure_logging("debug" if verbose else None)

    try:
        options = ConsolidateOptions(
            fix=fix,
            check=check,
            manifest_path=manifest_path,
            process_dependencies=not no_dependencies,
            process_dev_dependencies=not no_dev_dependencies,
            process_build_dependencies=not no_build_dependencies,
            exclude=_split_csv(exclude),
            exclude_members=_split_csv(exclude_members),
            min_members=min_members,
            strategy=version_resolution,
            output_format=output_format,
        )
        run(options, output=_echo)

    except CheckFailedError:
        # Already reported by the run in text mode; JSON consumers read the report
        raise typer.Exit(1)
    except KeyboardInterrupt:
        info("\nCancelled by user")
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, verbose)
        raise typer.Exit(1)
