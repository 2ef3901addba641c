"""wsdeps CLI - Main entry point."""
import typer

from . import consolidate_cmd, info_cmd

app = typer.Typer(
    name="wsdeps",
    help="wsdeps - Consolidate Cargo workspace dependencies",
    no_args_is_help=True,
    add_completion=False,
)

# Register all commands
app.command()(consolidate_cmd.consolidate)
app.command()(info_cmd.version)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
