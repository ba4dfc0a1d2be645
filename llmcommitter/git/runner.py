"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of the current git repository
"""

import subprocess
from pathlib import Path
from typing import Optional

from llmcommitter.git.exceptions import GitError, NotAGitRepositoryError


def _run_git_command(
    args: list[str],
    cwd: Optional[Path] = None,
    input_text: Optional[str] = None,
    strip: bool = True,
) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run the command in. Defaults to the process cwd.
        input_text: Optional text passed to the command's stdin.
        strip: Whether to strip surrounding whitespace from stdout.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails.
    """
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
            input=input_text,
        )
        return result.stdout.strip() if strip else result.stdout
    except subprocess.CalledProcessError as e:
        output = "\n".join(part.strip() for part in (e.stderr, e.stdout) if part and part.strip())
        raise GitError(f"Git command failed: git {' '.join(args)}\n{output}")
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.")


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the current git repository.

    Args:
        cwd: Directory to start from. Defaults to the process cwd.

    Returns:
        Path to the repository root.

    Raises:
        NotAGitRepositoryError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd)
        return Path(root)
    except GitError:
        raise NotAGitRepositoryError(
            "Not in a git repository. Please run this command from within a git repo."
        )
