"""CLI commands for building, editing and committing groups."""

from typing import List, Optional

import typer

from llmcommitter.batch import CommitEvent, CommitEventKind
from llmcommitter.cli.utils import (
    echo_generation_result,
    echo_group,
    echo_progress,
    open_app_context,
    refresh_or_exit,
    resolve_group_id,
    run_async,
    to_repo_paths,
)
from llmcommitter.git.exceptions import GitError


def status_command() -> None:
    """Show changed files, staged groups and the general context."""
    with open_app_context() as context:
        state = refresh_or_exit(context)

        unclaimed = state.unclaimed_files
        typer.echo(f"Ungrouped changes ({len(unclaimed)}):")
        for path in unclaimed:
            typer.echo(f"  {path}")
        if not unclaimed:
            typer.echo("  (none)")

        typer.echo("")
        typer.echo(f"Staged groups ({len(state.staged_groups)}):")
        for index, group in enumerate(state.staged_groups, start=1):
            echo_group(index, group)
        if not state.staged_groups:
            typer.echo("  (none)")

        if state.general_context:
            typer.echo("")
            typer.echo(f"General context: {state.general_context}")


def group_command(
    files: Optional[List[str]] = typer.Argument(
        None,
        help="Files to group (default: every ungrouped changed file)",
    ),
    context_text: str = typer.Option(
        "",
        "--context",
        "-c",
        help="Context for this group, passed to the LLM",
    ),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Use this commit message instead of generating one",
    ),
    generate: bool = typer.Option(
        False,
        "--generate",
        "-g",
        help="Generate the commit message with the LLM (default without --message)",
    ),
) -> None:
    """Group files and stage the group with a commit message."""
    if message is not None and generate:
        typer.echo("Use either --message or --generate, not both.", err=True)
        raise typer.Exit(1)

    with open_app_context() as context:
        state = refresh_or_exit(context)
        machine = context.state_machine

        candidates = to_repo_paths(context.repo_root, files) if files else list(state.unclaimed_files)
        if not machine.start_group(candidates):
            typer.echo("No ungrouped changed files to group.", err=True)
            raise typer.Exit(1)

        draft = machine.state.draft
        skipped = [path for path in candidates if path not in draft.files]
        if skipped:
            typer.echo(f"Skipping unchanged or already staged files: {', '.join(skipped)}", err=True)

        if context_text:
            machine.update_draft_context(context_text)

        if message is not None:
            machine.update_draft_message(message)
        else:
            typer.echo(f"Generating commit message for {len(draft.files)} file(s)...", err=True)
            subscription = context.pipeline.progress.subscribe(echo_progress)
            try:
                result = run_async(context.generate())
            finally:
                subscription.dispose()
            echo_generation_result(result)
            if not result.success:
                machine.clear_draft()
                raise typer.Exit(1)

        if not machine.stage_draft():
            typer.echo("Cannot stage the group: the commit message is empty.", err=True)
            machine.clear_draft()
            raise typer.Exit(1)

        group = machine.state.staged_groups[-1]
        typer.echo(f"✓ Staged group {group.id[:8]} with {len(group.files)} file(s)")


def edit_command(
    group_ref: str = typer.Argument(..., help="Group position or id prefix"),
    context_text: Optional[str] = typer.Option(
        None,
        "--context",
        "-c",
        help="Replace the group's context",
    ),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Replace the group's commit message",
    ),
    remove_files: Optional[List[str]] = typer.Option(
        None,
        "--remove-file",
        "-r",
        help="Remove a file from the group (repeatable)",
    ),
    generate: bool = typer.Option(
        False,
        "--generate",
        "-g",
        help="Regenerate the commit message with the LLM",
    ),
) -> None:
    """Edit a staged group."""
    with open_app_context() as context:
        state = refresh_or_exit(context)
        machine = context.state_machine
        group_id = resolve_group_id(state, group_ref)
        machine.review_staged_group(group_id)

        if context_text is not None or message is not None:
            machine.update_staged_group(group_id, specific_context=context_text, commit_message=message)

        for path in to_repo_paths(context.repo_root, remove_files or []):
            if not machine.remove_file_from_staged_group(group_id, path):
                typer.echo(f"{path} is not in this group.", err=True)

        if machine.state.get_staged_group(group_id) is None:
            typer.echo("Group removed: it has no files left.")
            return

        if generate:
            subscription = context.pipeline.progress.subscribe(echo_progress)
            try:
                result = run_async(context.generate(group_id))
            finally:
                subscription.dispose()
            echo_generation_result(result)
            if not result.success:
                raise typer.Exit(1)

        state = machine.state
        index = next(i for i, g in enumerate(state.staged_groups, start=1) if g.id == group_id)
        echo_group(index, state.get_staged_group(group_id))


def unstage_command(
    group_ref: str = typer.Argument(..., help="Group position or id prefix"),
) -> None:
    """Unstage a group, returning its files to the ungrouped list."""
    with open_app_context() as context:
        state = refresh_or_exit(context)
        group_id = resolve_group_id(state, group_ref)
        context.state_machine.unstage(group_id)
        typer.echo(f"✓ Unstaged group {group_id[:8]}")


def _echo_commit_event(event: CommitEvent) -> None:
    if event.kind == CommitEventKind.SUCCESS:
        typer.echo(f"  ✓ [{event.index}/{event.total}] {event.commit_sha[:12]}")
    elif event.kind == CommitEventKind.FAILURE:
        typer.echo(f"  ✗ [{event.index}/{event.total}] {event.error}", err=True)


def commit_command(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Bypass confirmation prompt and commit immediately",
    ),
) -> None:
    """Commit every staged group, one commit per group."""
    with open_app_context() as context:
        state = refresh_or_exit(context)
        groups = state.staged_groups
        if not groups:
            typer.echo("No staged groups to commit.", err=True)
            raise typer.Exit(1)

        typer.echo(f"About to create {len(groups)} commit(s):")
        for index, group in enumerate(groups, start=1):
            echo_group(index, group)

        if not yes:
            typer.echo("")
            confirm = typer.prompt(
                "Commit all staged groups? [Y/n]",
                default="y",
                show_default=False,
            )
            if confirm.lower() not in ("y", "yes", ""):
                typer.echo("Commit cancelled.", err=True)
                raise typer.Exit(0)

        subscription = context.coordinator.events.subscribe(_echo_commit_event)
        try:
            summary = run_async(context.commit_all())
        finally:
            subscription.dispose()

        typer.echo(f"{summary.success_count} committed, {summary.failure_count} failed.")
        if summary.failure_count:
            raise typer.Exit(1)


def context_command(
    text: Optional[str] = typer.Argument(None, help="New general context"),
    clear: bool = typer.Option(False, "--clear", help="Clear the general context"),
) -> None:
    """Show or set the general context shared by every group in this repository."""
    with open_app_context() as context:
        machine = context.state_machine
        if clear:
            machine.set_general_context("")
            typer.echo("✓ General context cleared")
        elif text is not None:
            machine.set_general_context(text)
            typer.echo("✓ General context saved")
        else:
            typer.echo(machine.state.general_context or "(no general context)")


def revert_command(
    path: str = typer.Argument(..., help="File whose changes to discard"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Discard all changes to a file."""
    with open_app_context() as context:
        [repo_path] = to_repo_paths(context.repo_root, [path])
        if not yes:
            typer.confirm(f"Discard all changes to {repo_path}?", abort=True)
        try:
            run_async(context.revert(repo_path))
        except GitError as e:
            typer.echo(f"Git error: {e}", err=True)
            raise typer.Exit(1)
        typer.echo(f"✓ Reverted {repo_path}")
