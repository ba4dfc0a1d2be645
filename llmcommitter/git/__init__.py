"""Git layer for llmcommitter.

This package provides the DiffSource and RepositoryGateway collaborators:
- exceptions: GitError, NotAGitRepositoryError, NothingToCommitError,
              EmptyCommitMessageError
- runner: _run_git_command, get_repo_root
- models: ChangeKind, StatusEntry, FileDiff, DiffSource, RepositoryGateway
- status: parse_porcelain_status, get_status_entries, list_changed_files
- diff: cap_diff, get_file_diff, get_file_diffs, MAX_DIFF_CHARS
- repository: GitRepository
"""

# Exceptions
from llmcommitter.git.exceptions import (
    EmptyCommitMessageError,
    GitError,
    NotAGitRepositoryError,
    NothingToCommitError,
)

# Runner utilities
from llmcommitter.git.runner import (
    _run_git_command,
    get_repo_root,
)

# Models and interfaces
from llmcommitter.git.models import (
    ChangeKind,
    DiffSource,
    FileDiff,
    RepositoryGateway,
    StatusEntry,
)

# Status utilities
from llmcommitter.git.status import (
    get_status_entries,
    list_changed_files,
    parse_porcelain_status,
)

# Diff utilities
from llmcommitter.git.diff import (
    MAX_DIFF_CHARS,
    TRUNCATION_MARKER,
    cap_diff,
    get_file_diff,
    get_file_diffs,
)

# Repository adapter
from llmcommitter.git.repository import GitRepository


__all__ = [
    # Exceptions
    "GitError",
    "NotAGitRepositoryError",
    "NothingToCommitError",
    "EmptyCommitMessageError",
    # Runner
    "_run_git_command",
    "get_repo_root",
    # Models
    "ChangeKind",
    "DiffSource",
    "FileDiff",
    "RepositoryGateway",
    "StatusEntry",
    # Status
    "get_status_entries",
    "list_changed_files",
    "parse_porcelain_status",
    # Diff
    "MAX_DIFF_CHARS",
    "TRUNCATION_MARKER",
    "cap_diff",
    "get_file_diff",
    "get_file_diffs",
    # Repository
    "GitRepository",
]
