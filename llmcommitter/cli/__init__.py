"""CLI entry point for llmcommitter.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from llmcommitter.cli.config import config_app
from llmcommitter.cli.groups import (
    commit_command,
    context_command,
    edit_command,
    group_command,
    revert_command,
    status_command,
    unstage_command,
)
from llmcommitter.cli.main import main_callback

# Main application
app = typer.Typer(
    name="llmcommitter",
    help="llmcommitter: group changes and commit them with LLM-written messages",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("status")(status_command)
app.command("group")(group_command)
app.command("edit")(edit_command)
app.command("unstage")(unstage_command)
app.command("commit")(commit_command)
app.command("context")(context_command)
app.command("revert")(revert_command)

# Global options (--debug, --version)
app.callback(invoke_without_command=True)(main_callback)


__all__ = ["app"]
