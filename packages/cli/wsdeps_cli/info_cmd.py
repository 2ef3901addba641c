"""Info commands - Version information."""
import sys

import typer
from rich.table import Table

from .utils import console, error


def version():
    """
    Show wsdeps version information.

    Displays versions of:
    - CLI package
    - SDK package
    - Report schema
    - Python runtime

    Examples:
        wsdeps version
    """
    try:
        import wsdeps_sdk
        from wsdeps_common.constants import OUTPUT_SCHEMA_VERSION

        from . import __version__ as cli_version

        python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        table = Table(title="wsdeps Version Information", show_header=True, header_style="bold cyan")
        table.add_column("Component", style="cyan", no_wrap=True)
        table.add_column("Version", style="green")

        table.add_row("CLI", cli_version)
        table.add_row("SDK", wsdeps_sdk.__version__)
        table.add_row("Report schema", OUTPUT_SCHEMA_VERSION)
        table.add_row("Python", python_version)

        console.print(table)

    except Exception as e:
        error(f"Failed to get version info: {str(e)}")
        raise typer.Exit(1)
