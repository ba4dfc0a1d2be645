"""Git repository adapter.

Contains:
- GitRepository: DiffSource and RepositoryGateway backed by the git CLI

Every git call is blocking, so the async methods run it off the event
loop with asyncio.to_thread. Callers await them one at a time.
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from llmcommitter.git.diff import MAX_DIFF_CHARS, get_file_diffs
from llmcommitter.git.exceptions import (
    EmptyCommitMessageError,
    GitError,
    NothingToCommitError,
)
from llmcommitter.git.models import ChangeKind, FileDiff
from llmcommitter.git.runner import _run_git_command, get_repo_root
from llmcommitter.git.status import get_status_entries, list_changed_files

_NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "no changes added to commit")


class GitRepository:
    """Reads change state from, and commits to, one git work tree."""

    def __init__(self, repo_root: Optional[Path] = None, max_diff_chars: int = MAX_DIFF_CHARS):
        self.repo_root = repo_root or get_repo_root()
        self.max_diff_chars = max_diff_chars

    # DiffSource

    async def list_changed_files(self) -> list[str]:
        return await asyncio.to_thread(list_changed_files, self.repo_root)

    async def get_diffs(self, paths: Sequence[str]) -> list[FileDiff]:
        return await asyncio.to_thread(
            get_file_diffs, self.repo_root, list(paths), self.max_diff_chars
        )

    async def revert(self, path: str) -> None:
        await asyncio.to_thread(self._revert, path)

    def _revert(self, path: str) -> None:
        entries = {entry.path: entry for entry in get_status_entries(self.repo_root)}
        entry = entries.get(path)
        if entry is None:
            raise GitError(f"Cannot revert {path}: file has no changes.")

        if entry.is_untracked:
            try:
                (self.repo_root / path).unlink()
            except OSError as e:
                raise GitError(f"Failed to remove untracked file {path}: {e}")
        elif entry.change_kind == ChangeKind.ADDED:
            _run_git_command(["rm", "-f", "--", path], cwd=self.repo_root)
        elif entry.change_kind == ChangeKind.RENAMED and entry.original_path:
            _run_git_command(["rm", "-f", "--", path], cwd=self.repo_root)
            _run_git_command(["checkout", "HEAD", "--", entry.original_path], cwd=self.repo_root)
        else:
            _run_git_command(["checkout", "HEAD", "--", path], cwd=self.repo_root)
        logger.info(f"Reverted {path}")

    # RepositoryGateway

    async def stage(self, paths: Sequence[str]) -> None:
        if not paths:
            raise GitError("No files to stage.")
        await asyncio.to_thread(
            _run_git_command, ["add", "-A", "--"] + list(paths), self.repo_root
        )

    async def commit(self, message: str, paths: Sequence[str]) -> str:
        """Commit the given paths with the given message.

        Only these paths are recorded. Other staged changes are left in
        the index and are not part of the commit.

        Args:
            message: The commit message.
            paths: The paths to commit, already staged.

        Returns:
            The new commit hash.

        Raises:
            EmptyCommitMessageError: If the message is blank.
            NothingToCommitError: If none of the paths has staged changes.
            GitError: If the commit fails for any other reason.
        """
        if not message or not message.strip():
            raise EmptyCommitMessageError("Cannot commit with an empty commit message.")
        if not paths:
            raise NothingToCommitError("Nothing to commit: no files given.")
        return await asyncio.to_thread(self._commit, message.strip(), list(paths))

    def _commit(self, message: str, paths: list[str]) -> str:
        staged = _run_git_command(
            ["diff", "--cached", "--name-only", "--"] + paths, cwd=self.repo_root
        )
        if not staged:
            raise NothingToCommitError(
                "Nothing to commit: no changes are staged (staging may have failed)."
            )

        try:
            _run_git_command(
                ["commit", "-F", "-", "--only", "--"] + paths,
                cwd=self.repo_root,
                input_text=message,
            )
        except GitError as e:
            if any(marker in str(e).lower() for marker in _NOTHING_TO_COMMIT_MARKERS):
                raise NothingToCommitError(f"Nothing to commit: {e}")
            raise

        return _run_git_command(["rev-parse", "HEAD"], cwd=self.repo_root)
