"""reportforge CLI entry point."""

import logging

import typer

from reportforge import __version__
from reportforge.cli.extract_cmd import extract
from reportforge.cli.generate_cmd import generate
from reportforge.cli.validate_cmd import validate
from reportforge.logging import setup_logging

app = typer.Typer(
    name="reportforge",
    help="Turn AI run reports into validated benchmark result files",
    no_args_is_help=True,
)

# Register subcommands
app.command()(extract)
app.command()(generate)
app.command()(validate)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reportforge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log extraction details."),
) -> None:
    """Turn AI run reports into validated benchmark result files."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
