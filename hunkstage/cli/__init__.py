"""CLI entry point for hunkstage.

This module provides the main CLI application that combines all commands
into a single interface.
"""

from typing import Optional

import typer

from hunkstage import __version__
from hunkstage.config import ConfigError
from hunkstage.logging import configure_logging
from hunkstage.cli.commands import (
    clone_command,
    diff_command,
    stage_command,
    status_command,
)

# Main application
app = typer.Typer(
    name="hunkstage",
    help="hunkstage: line-level git staging",
    add_completion=False,
)


def main_callback(
    ctx: typer.Context,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Configure logging before any command runs."""
    if version:
        typer.echo(f"hunkstage {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        configure_logging(level=log_level)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


app.callback(invoke_without_command=True)(main_callback)

app.command("status")(status_command)
app.command("diff")(diff_command)
app.command("stage")(stage_command)
app.command("clone")(clone_command)


__all__ = [
    "app",
    "main_callback",
    "status_command",
    "diff_command",
    "stage_command",
    "clone_command",
]
