"""Tests for llmcommitter.git package."""

import asyncio
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from llmcommitter.git import (
    MAX_DIFF_CHARS,
    TRUNCATION_MARKER,
    ChangeKind,
    EmptyCommitMessageError,
    GitError,
    GitRepository,
    NotAGitRepositoryError,
    NothingToCommitError,
    StatusEntry,
    _run_git_command,
    cap_diff,
    get_file_diff,
    get_file_diffs,
    get_repo_root,
    list_changed_files,
    parse_porcelain_status,
)


class TestRunGitCommand:
    """Tests for _run_git_command function."""

    def test_successful_command(self, mocker):
        """Test successful git command execution."""
        mock_result = MagicMock()
        mock_result.stdout = "output\n"
        mocker.patch("subprocess.run", return_value=mock_result)

        assert _run_git_command(["status"]) == "output"

    def test_unstripped_output(self, mocker):
        """Test that strip=False keeps raw output."""
        mock_result = MagicMock()
        mock_result.stdout = " M a.py\0"
        mocker.patch("subprocess.run", return_value=mock_result)

        assert _run_git_command(["status"], strip=False) == " M a.py\0"

    def test_passes_stdin(self, mocker):
        """Test that input text is forwarded."""
        mock_run = mocker.patch("subprocess.run", return_value=MagicMock(stdout=""))

        _run_git_command(["commit", "-F", "-"], input_text="msg")

        assert mock_run.call_args.kwargs["input"] == "msg"

    def test_failed_command_raises_error(self, mocker):
        """Test that failed command raises GitError with git's output."""
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "git", stderr="fatal: bad revision"),
        )

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["invalid"])

        assert "Git command failed" in str(exc_info.value)
        assert "fatal: bad revision" in str(exc_info.value)

    def test_git_not_found_raises_error(self, mocker):
        """Test that missing git raises GitError."""
        mocker.patch("subprocess.run", side_effect=FileNotFoundError())

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["status"])

        assert "not installed" in str(exc_info.value)


class TestGetRepoRoot:
    """Tests for get_repo_root function."""

    def test_returns_path(self, mocker):
        """Test that repo root path is returned."""
        mocker.patch("subprocess.run", return_value=MagicMock(stdout="/path/to/repo\n"))

        assert get_repo_root() == Path("/path/to/repo")

    def test_raises_error_if_not_repo(self, mocker):
        """Test error if not in a git repository."""
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(128, "git", stderr="not a git repo"),
        )

        with pytest.raises(NotAGitRepositoryError):
            get_repo_root()


class TestParsePorcelainStatus:
    """Tests for parse_porcelain_status function."""

    def test_basic_entries(self):
        """Test modified, added, deleted and untracked files."""
        output = " M src/a.py\0A  b.py\0 D c.py\0?? new dir/d.py\0"

        entries = parse_porcelain_status(output)

        assert [e.path for e in entries] == ["src/a.py", "b.py", "c.py", "new dir/d.py"]
        assert [e.change_kind for e in entries] == [
            ChangeKind.MODIFIED,
            ChangeKind.ADDED,
            ChangeKind.DELETED,
            ChangeKind.ADDED,
        ]
        assert entries[3].is_untracked is True

    def test_rename_consumes_original_path(self):
        """Test that a rename's source path is read from the next record."""
        output = "R  new.py\0old.py\0 M other.py\0"

        entries = parse_porcelain_status(output)

        assert len(entries) == 2
        assert entries[0].path == "new.py"
        assert entries[0].original_path == "old.py"
        assert entries[0].change_kind == ChangeKind.RENAMED
        assert entries[1].path == "other.py"

    def test_empty_output(self):
        """Test that clean output yields no entries."""
        assert parse_porcelain_status("") == []


class TestStatusEntry:
    """Tests for StatusEntry.change_kind."""

    def test_modified_in_index_and_worktree(self):
        """Test that MM is a modification."""
        assert StatusEntry("a.py", "M", "M").change_kind == ChangeKind.MODIFIED

    def test_deleted_takes_precedence_over_rename(self):
        """Test that a renamed then deleted file counts as deleted."""
        assert StatusEntry("a.py", "R", "D", "b.py").change_kind == ChangeKind.DELETED


class TestListChangedFiles:
    """Tests for list_changed_files function."""

    def test_dedupes_paths(self, mocker):
        """Test that each path appears once in status order."""
        mocker.patch(
            "llmcommitter.git.status._run_git_command",
            return_value=" M b.py\0?? a.py\0 M b.py\0",
        )

        assert list_changed_files(Path("/repo")) == ["b.py", "a.py"]


class TestCapDiff:
    """Tests for cap_diff function."""

    def test_short_diff_unchanged(self):
        """Test that text within the cap is kept."""
        assert cap_diff("abc", 10) == ("abc", False)

    def test_long_diff_truncated(self):
        """Test that long text is cut and marked."""
        text, truncated = cap_diff("x" * (MAX_DIFF_CHARS + 5))

        assert truncated is True
        assert text == "x" * MAX_DIFF_CHARS + TRUNCATION_MARKER


class TestGetFileDiff:
    """Tests for get_file_diff and get_file_diffs."""

    def test_untracked_file_rendered_as_added(self, mock_repo_root):
        """Test that untracked files become all-added diffs."""
        (mock_repo_root / "new.py").write_text("line1\nline2\n")

        diff = get_file_diff(mock_repo_root, StatusEntry("new.py", "?", "?"))

        assert diff.change_kind == ChangeKind.ADDED
        assert "+++ b/new.py" in diff.content
        assert "+line1\n+line2" in diff.content
        assert diff.truncated is False

    def test_tracked_file_diffed_against_head(self, mocker, mock_repo_root):
        """Test that tracked files use git diff HEAD."""
        mock_git = mocker.patch("llmcommitter.git.diff._run_git_command", return_value="-old\n+new")

        diff = get_file_diff(mock_repo_root, StatusEntry("a.py", " ", "M"))

        assert diff.content == "-old\n+new"
        assert mock_git.call_args.args[0] == ["diff", "HEAD", "-M", "--", "a.py"]

    def test_falls_back_to_cached_without_head(self, mocker, mock_repo_root):
        """Test the staged diff in a repository with no commits."""
        mock_git = mocker.patch(
            "llmcommitter.git.diff._run_git_command",
            side_effect=[GitError("bad revision 'HEAD'"), "+first"],
        )

        diff = get_file_diff(mock_repo_root, StatusEntry("a.py", "A", " "))

        assert diff.content == "+first"
        assert mock_git.call_args.args[0][:2] == ["diff", "--cached"]

    def test_rename_includes_both_paths(self, mocker, mock_repo_root):
        """Test that renames are diffed with their source path."""
        mock_git = mocker.patch("llmcommitter.git.diff._run_git_command", return_value="rename")

        get_file_diff(mock_repo_root, StatusEntry("new.py", "R", " ", "old.py"))

        assert mock_git.call_args.args[0][-2:] == ["old.py", "new.py"]

    def test_empty_diff_placeholder(self, mocker, mock_repo_root):
        """Test that mode-only changes still produce content."""
        mocker.patch("llmcommitter.git.diff._run_git_command", return_value="")

        diff = get_file_diff(mock_repo_root, StatusEntry("a.sh", " ", "M"))

        assert diff.content == "(no textual changes)"

    def test_get_file_diffs_skips_unchanged(self, mocker, mock_repo_root):
        """Test that paths without changes are skipped and order kept."""
        mocker.patch(
            "llmcommitter.git.diff.get_status_entries",
            return_value=[StatusEntry("b.py", " ", "M"), StatusEntry("a.py", " ", "M")],
        )
        mocker.patch("llmcommitter.git.diff._run_git_command", return_value="+x")

        diffs = get_file_diffs(mock_repo_root, ["a.py", "gone.py", "b.py"])

        assert [d.path for d in diffs] == ["a.py", "b.py"]


class TestGitRepository:
    """Tests for GitRepository."""

    def test_stage(self, mocker, mock_repo_root):
        """Test that staging adds exactly the given paths."""
        mock_git = mocker.patch("llmcommitter.git.repository._run_git_command", return_value="")

        asyncio.run(GitRepository(mock_repo_root).stage(["a.py", "b.py"]))

        mock_git.assert_called_once_with(["add", "-A", "--", "a.py", "b.py"], mock_repo_root)

    def test_stage_nothing_raises(self, mock_repo_root):
        """Test that an empty path list is rejected."""
        with pytest.raises(GitError):
            asyncio.run(GitRepository(mock_repo_root).stage([]))

    def test_commit_returns_sha(self, mocker, mock_repo_root):
        """Test a successful commit of only the given paths."""
        mock_git = mocker.patch(
            "llmcommitter.git.repository._run_git_command",
            side_effect=["a.py", "", "abc123"],
        )

        sha = asyncio.run(GitRepository(mock_repo_root).commit("  feat: add a  ", ["a.py"]))

        assert sha == "abc123"
        assert mock_git.call_args_list[0] == call(
            ["diff", "--cached", "--name-only", "--", "a.py"], cwd=mock_repo_root
        )
        assert mock_git.call_args_list[1] == call(
            ["commit", "-F", "-", "--only", "--", "a.py"],
            cwd=mock_repo_root,
            input_text="feat: add a",
        )

    def test_commit_empty_message(self, mock_repo_root):
        """Test that blank messages are rejected."""
        with pytest.raises(EmptyCommitMessageError):
            asyncio.run(GitRepository(mock_repo_root).commit("   ", ["a.py"]))

    def test_commit_without_paths(self, mocker, mock_repo_root):
        """Test that an empty path list never reaches git."""
        mock_git = mocker.patch("llmcommitter.git.repository._run_git_command")

        with pytest.raises(NothingToCommitError):
            asyncio.run(GitRepository(mock_repo_root).commit("msg", []))

        mock_git.assert_not_called()

    def test_commit_with_empty_index(self, mocker, mock_repo_root):
        """Test that unstaged paths raise NothingToCommitError."""
        mocker.patch("llmcommitter.git.repository._run_git_command", return_value="")

        with pytest.raises(NothingToCommitError) as exc_info:
            asyncio.run(GitRepository(mock_repo_root).commit("msg", ["a.py"]))

        assert str(exc_info.value).startswith("Nothing to commit")

    def test_commit_failure_propagates(self, mocker, mock_repo_root):
        """Test that hook failures surface as GitError."""
        mocker.patch(
            "llmcommitter.git.repository._run_git_command",
            side_effect=["a.py", GitError("pre-commit hook failed")],
        )

        with pytest.raises(GitError) as exc_info:
            asyncio.run(GitRepository(mock_repo_root).commit("msg", ["a.py"]))

        assert not isinstance(exc_info.value, NothingToCommitError)

    def test_revert_tracked_file(self, mocker, mock_repo_root):
        """Test that a modified file is checked out from HEAD."""
        mocker.patch(
            "llmcommitter.git.repository.get_status_entries",
            return_value=[StatusEntry("a.py", " ", "M")],
        )
        mock_git = mocker.patch("llmcommitter.git.repository._run_git_command", return_value="")

        asyncio.run(GitRepository(mock_repo_root).revert("a.py"))

        mock_git.assert_called_once_with(["checkout", "HEAD", "--", "a.py"], cwd=mock_repo_root)

    def test_revert_untracked_file(self, mocker, mock_repo_root):
        """Test that an untracked file is deleted."""
        (mock_repo_root / "new.py").write_text("x")
        mocker.patch(
            "llmcommitter.git.repository.get_status_entries",
            return_value=[StatusEntry("new.py", "?", "?")],
        )

        asyncio.run(GitRepository(mock_repo_root).revert("new.py"))

        assert not (mock_repo_root / "new.py").exists()

    def test_revert_unknown_file(self, mocker, mock_repo_root):
        """Test reverting a file without changes."""
        mocker.patch("llmcommitter.git.repository.get_status_entries", return_value=[])

        with pytest.raises(GitError):
            asyncio.run(GitRepository(mock_repo_root).revert("a.py"))
