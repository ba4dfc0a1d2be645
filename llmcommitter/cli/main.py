"""Main CLI callback: global options shared by every command."""

from typing import Optional

import typer

from llmcommitter import __version__
from llmcommitter.logs import setup_logging


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"llmcommitter {__version__}")
        raise typer.Exit()


def main_callback(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Show debug logging on the console",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Group uncommitted changes and commit each group with an LLM-written message."""
    setup_logging(debug=debug)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
