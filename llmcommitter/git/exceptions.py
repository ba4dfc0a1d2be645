"""Git-related exception classes.

Contains all exception classes for Git operations:
- GitError: Base exception for git-related errors
- NotAGitRepositoryError: Raised outside of a git work tree
- NothingToCommitError: Raised when a commit finds an empty index
- EmptyCommitMessageError: Raised when committing with a blank message
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    pass


class NotAGitRepositoryError(GitError):
    """Raised when the working directory is not inside a git repository."""

    pass


class NothingToCommitError(GitError):
    """Raised when there is nothing staged to commit."""

    pass


class EmptyCommitMessageError(GitError):
    """Raised when a commit is attempted with a blank message."""

    pass
