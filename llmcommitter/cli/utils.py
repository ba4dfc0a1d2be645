"""Shared utility functions for CLI commands."""

import asyncio
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence

import typer

from llmcommitter.app import AppContext
from llmcommitter.git.exceptions import GitError
from llmcommitter.global_config import GlobalConfigError
from llmcommitter.pipeline import GenerationProgress, GenerationResult
from llmcommitter.state import AppState, StagedGroup


def run_async(coro):
    """Run a coroutine on a fresh event loop."""
    return asyncio.run(coro)


@contextmanager
def open_app_context() -> Iterator[AppContext]:
    """Create the AppContext for the current repository, exiting on failure."""
    try:
        context = AppContext.create()
    except (GitError, GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    with context:
        yield context


def refresh_or_exit(context: AppContext) -> AppState:
    try:
        return run_async(context.refresh())
    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)


def to_repo_paths(repo_root: Path, paths: Sequence[str]) -> list[str]:
    """Convert command-line paths to repo-relative POSIX paths.

    Paths outside the repository are passed through unchanged, so the
    state machine can reject them.

    Args:
        repo_root: The root directory of the git repository.
        paths: Paths as typed, relative to the current directory.

    Returns:
        Repo-relative paths.
    """
    root = repo_root.resolve()
    result = []
    for raw in paths:
        try:
            result.append((Path.cwd() / raw).resolve().relative_to(root).as_posix())
        except ValueError:
            result.append(raw)
    return result


def resolve_group_id(state: AppState, reference: str) -> str:
    """Find a staged group by 1-based position or by unique id prefix.

    Args:
        state: The current state.
        reference: What the user typed.

    Returns:
        The full group id.

    Raises:
        typer.Exit: If no group, or more than one, matches.
    """
    groups = state.staged_groups
    if reference.isdigit() and 1 <= int(reference) <= len(groups):
        return groups[int(reference) - 1].id

    matches = [group.id for group in groups if group.id.startswith(reference)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        typer.echo(f"No staged group matches '{reference}'.", err=True)
    else:
        typer.echo(f"'{reference}' matches {len(matches)} groups; use a longer prefix.", err=True)
    raise typer.Exit(1)


def echo_group(index: int, group: StagedGroup) -> None:
    """Print one staged group."""
    title = group.commit_message.splitlines()[0]
    typer.echo(f"  [{index}] {group.id[:8]}  {title}")
    for path in group.files:
        typer.echo(f"        {path}")
    if group.specific_context:
        typer.echo(f"        context: {group.specific_context}")


def echo_progress(progress: GenerationProgress) -> None:
    typer.echo(f"  {progress.description}", err=True)


def echo_generation_result(result: GenerationResult) -> None:
    """Print the generated message, or the failure."""
    if not result.success:
        typer.echo(f"Generation failed: {result.error}", err=True)
        return

    typer.echo("")
    typer.echo("=" * 60)
    typer.echo(result.message)
    typer.echo("=" * 60)
    details = []
    if result.tokens_used is not None:
        details.append(f"{result.tokens_used} tokens")
    if result.truncated:
        details.append("some diffs were truncated")
    if details:
        typer.echo(f"({', '.join(details)})", err=True)
