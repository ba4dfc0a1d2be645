"""Workspace state file paths for llmcommitter.

Contains functions for getting paths to per-repository state:
- get_state_dir: Get the .llmcommitter directory
- ensure_state_dir: Create the .llmcommitter directory
- get_state_file: Get path to the workspace state JSON file
"""

from pathlib import Path

STATE_DIR_NAME = ".llmcommitter"
STATE_FILE_NAME = "workspace_state.json"


def get_state_dir(repo_root: Path) -> Path:
    """Return the .llmcommitter directory of a repository.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to the .llmcommitter directory.
    """
    return repo_root / STATE_DIR_NAME


def ensure_state_dir(repo_root: Path) -> Path:
    """Create the .llmcommitter directory if needed.

    The directory ignores itself so the state file never shows up as a
    changed file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to the .llmcommitter directory.
    """
    state_dir = get_state_dir(repo_root)
    state_dir.mkdir(exist_ok=True)
    gitignore = state_dir / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text("*\n")
    return state_dir


def get_state_file(repo_root: Path) -> Path:
    """Return path to the workspace state file.

    Args:
        repo_root: The root directory of the git repository.

    Returns:
        Path to workspace_state.json.
    """
    return get_state_dir(repo_root) / STATE_FILE_NAME
