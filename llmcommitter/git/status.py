"""Git status utilities.

Contains:
- get_status_entries: Run `git status` and parse it into StatusEntry records
- parse_porcelain_status: Parse NUL-separated porcelain v1 output
- list_changed_files: Repo-relative paths of all changed files
"""

from pathlib import Path
from typing import Optional

from llmcommitter.git.models import StatusEntry
from llmcommitter.git.runner import _run_git_command


def parse_porcelain_status(output: str) -> list[StatusEntry]:
    """Parse `git status --porcelain=v1 -z` output.

    Each record is "XY path". Renames and copies are followed by an
    extra record holding the original path.

    Args:
        output: Raw NUL-separated status output.

    Returns:
        Parsed entries in git's order.
    """
    entries = []
    records = output.split("\0")
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        # Skip empty trailing records and malformed lines
        if len(record) < 4:
            continue

        index_status = record[0]
        worktree_status = record[1]
        path = record[3:]
        original_path = None

        if index_status in ("R", "C") or worktree_status in ("R", "C"):
            if i < len(records):
                original_path = records[i]
                i += 1

        entries.append(
            StatusEntry(
                path=path,
                index_status=index_status,
                worktree_status=worktree_status,
                original_path=original_path,
            )
        )
    return entries


def get_status_entries(repo_root: Optional[Path] = None) -> list[StatusEntry]:
    """Get the parsed status of all changed and untracked files.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Parsed status entries.
    """
    output = _run_git_command(
        ["status", "--porcelain=v1", "-uall", "-z"], cwd=repo_root, strip=False
    )
    return parse_porcelain_status(output)


def list_changed_files(repo_root: Optional[Path] = None) -> list[str]:
    """Get the repo-relative paths of all changed files.

    Renamed files are reported under their new path.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        List of changed file paths, without duplicates.
    """
    seen = set()
    files = []
    for entry in get_status_entries(repo_root):
        if entry.path not in seen:
            seen.add(entry.path)
            files.append(entry.path)
    return files
