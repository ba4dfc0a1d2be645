"""Data models and collaborator interfaces for the git layer.

Contains:
- ChangeKind: Classification of a file's change
- StatusEntry: One parsed line of `git status --porcelain`
- FileDiff: Normalized, length-capped change record for one file
- DiffSource: Interface for reading repository change state
- RepositoryGateway: Interface for staging and committing
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence


class ChangeKind(str, Enum):
    """Classification of a file's diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class StatusEntry:
    """A single entry from `git status --porcelain=v1`.

    Attributes:
        path: Repo-relative path (the new path for renames).
        index_status: First status column (staged state).
        worktree_status: Second status column (unstaged state).
        original_path: Source path of a rename or copy.
    """

    path: str
    index_status: str
    worktree_status: str
    original_path: Optional[str] = None

    @property
    def is_untracked(self) -> bool:
        return self.index_status == "?" and self.worktree_status == "?"

    @property
    def change_kind(self) -> ChangeKind:
        if self.is_untracked or self.index_status == "A":
            return ChangeKind.ADDED
        if "D" in (self.index_status, self.worktree_status):
            return ChangeKind.DELETED
        if "R" in (self.index_status, self.worktree_status):
            return ChangeKind.RENAMED
        return ChangeKind.MODIFIED


@dataclass(frozen=True)
class FileDiff:
    """Diff for a single file, as handed to the generation pipeline.

    Attributes:
        path: Repo-relative file path.
        change_kind: How the file changed.
        content: Diff text, capped at a fixed length.
        truncated: Whether the content was cut to fit the cap.
    """

    path: str
    change_kind: ChangeKind
    content: str
    truncated: bool = False


class DiffSource(Protocol):
    """Reads repository change state."""

    async def list_changed_files(self) -> list[str]:
        ...

    async def get_diffs(self, paths: Sequence[str]) -> list[FileDiff]:
        ...

    async def revert(self, path: str) -> None:
        ...


class RepositoryGateway(Protocol):
    """Stages files and creates commits.

    A commit only records the given paths; anything else in the index
    stays staged and out of the commit.
    """

    async def stage(self, paths: Sequence[str]) -> None:
        ...

    async def commit(self, message: str, paths: Sequence[str]) -> str:
        ...
