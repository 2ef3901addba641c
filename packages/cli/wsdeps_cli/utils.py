"""Console helpers shared by CLI commands."""
import traceback

from rich.console import Console
from rich.markup import escape

from wsdeps_common.errors import WsdepsError

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def success(message: str):
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def error(message: str):
    """Print an error message."""
    err_console.print(f"[bold red]✗[/bold red] {message}")


def warning(message: str):
    """Print a warning message."""
    err_console.print(f"[yellow]![/yellow] {message}")


def info(message: str):
    """Print an informational message."""
    console.print(f"[cyan]i[/cyan] {message}")


def handle_error(e: Exception, verbose: bool = False):
    """
    Report an exception raised by a command.

    wsdeps errors are expected failures and print their message only;
    anything else is labelled unexpected. With verbose the traceback follows.
    """
    if isinstance(e, WsdepsError):
        error(escape(e.message))
    else:
        error(f"Unexpected error: {escape(str(e))}")
    if verbose:
        err_console.print(traceback.format_exc(), style="dim", markup=False)
