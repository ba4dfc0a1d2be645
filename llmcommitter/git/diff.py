"""Git diff utilities.

Contains:
- MAX_DIFF_CHARS: Fixed per-file cap on diff text handed to the LLM
- cap_diff: Truncate diff text to the cap, appending a marker
- get_file_diff: Build the FileDiff for one status entry
- get_file_diffs: Build FileDiffs for a list of paths
"""

from pathlib import Path
from typing import Sequence

from loguru import logger

from llmcommitter.git.exceptions import GitError
from llmcommitter.git.models import ChangeKind, FileDiff, StatusEntry
from llmcommitter.git.runner import _run_git_command
from llmcommitter.git.status import get_status_entries

MAX_DIFF_CHARS = 10000
TRUNCATION_MARKER = "\n... (diff content truncated due to length)"
NO_TEXT_CHANGES = "(no textual changes)"


def cap_diff(text: str, max_chars: int = MAX_DIFF_CHARS) -> tuple[str, bool]:
    """Cap diff text at max_chars.

    Args:
        text: The diff text.
        max_chars: Maximum number of characters kept from the diff.

    Returns:
        Tuple of (possibly truncated text, whether it was truncated).
    """
    if len(text) <= max_chars:
        return text, False
    return text[:max_chars] + TRUNCATION_MARKER, True


def _untracked_file_diff(repo_root: Path, path: str) -> str:
    """Render an untracked file as an all-added diff."""
    file_path = repo_root / path
    try:
        content = file_path.read_text()
    except UnicodeDecodeError:
        return f"Binary file {path} added"
    except OSError as e:
        raise GitError(f"Could not read untracked file {path}: {e}")

    lines = ["--- /dev/null", f"+++ b/{path}"]
    lines.extend(f"+{line}" for line in content.splitlines())
    return "\n".join(lines)


def _diff_against_head(repo_root: Path, paths: list[str]) -> str:
    """Diff the index and work tree against HEAD for the given paths.

    Falls back to the staged diff in a repository without commits.
    """
    try:
        return _run_git_command(["diff", "HEAD", "-M", "--"] + paths, cwd=repo_root)
    except GitError:
        return _run_git_command(["diff", "--cached", "-M", "--"] + paths, cwd=repo_root)


def get_file_diff(repo_root: Path, entry: StatusEntry, max_chars: int = MAX_DIFF_CHARS) -> FileDiff:
    """Build the capped FileDiff for one changed file.

    Args:
        repo_root: The root directory of the git repository.
        entry: The file's status entry.
        max_chars: Maximum diff characters kept.

    Returns:
        The FileDiff for the entry.

    Raises:
        GitError: If git fails or the file cannot be read.
    """
    kind = entry.change_kind

    if entry.is_untracked:
        raw = _untracked_file_diff(repo_root, entry.path)
    elif kind == ChangeKind.RENAMED and entry.original_path:
        raw = _diff_against_head(repo_root, [entry.original_path, entry.path])
    else:
        raw = _diff_against_head(repo_root, [entry.path])

    content, truncated = cap_diff(raw or NO_TEXT_CHANGES, max_chars)
    if truncated:
        logger.debug(f"Capped diff for {entry.path} at {max_chars} chars (was {len(raw)})")

    return FileDiff(path=entry.path, change_kind=kind, content=content, truncated=truncated)


def get_file_diffs(
    repo_root: Path, paths: Sequence[str], max_chars: int = MAX_DIFF_CHARS
) -> list[FileDiff]:
    """Build FileDiffs for the given paths, in the given order.

    Paths that no longer have changes are skipped with a warning.

    Args:
        repo_root: The root directory of the git repository.
        paths: Repo-relative paths to diff.
        max_chars: Maximum diff characters kept per file.

    Returns:
        One FileDiff per changed path.
    """
    entries = {entry.path: entry for entry in get_status_entries(repo_root)}

    diffs = []
    for path in paths:
        entry = entries.get(path)
        if entry is None:
            logger.warning(f"No changes found for {path}; skipping it")
            continue
        diffs.append(get_file_diff(repo_root, entry, max_chars))
    return diffs
