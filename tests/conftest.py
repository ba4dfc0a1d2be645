"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path
from typing import Optional, Sequence

import pytest

from llmcommitter.app import AppContext
from llmcommitter.config import API_KEY_ENV_VARS, LLMProvider, LLMSettings
from llmcommitter.git.exceptions import GitError, NothingToCommitError
from llmcommitter.git.models import ChangeKind, FileDiff
from llmcommitter.llm.base import BaseLLMProvider, CompletionSettings
from llmcommitter.llm.exceptions import ErrorKind, ProviderError
from llmcommitter.state import GroupStateMachine, WorkspaceStateStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_global_config(temp_dir, mocker, monkeypatch):
    """Point ~/.llmcommitter at a temp directory and hide real API keys."""
    config_dir = temp_dir / "home" / ".llmcommitter"
    mocker.patch("llmcommitter.global_config._CONFIG_DIR", config_dir)
    for env_var in API_KEY_ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)
    return config_dir


@pytest.fixture
def mock_repo_root(temp_dir):
    """Create a mock git repository root directory."""
    repo = temp_dir / "repo"
    repo.mkdir()
    (repo / ".git").mkdir()
    return repo


@pytest.fixture
def llm_settings():
    """Settings with a configured API key."""
    return LLMSettings(
        provider=LLMProvider.OPENAI,
        model="gpt-4o-mini",
        max_tokens=4000,
        temperature=0.3,
        instructions="Write a commit message.",
        api_key="test-key",
    )


class FakeDiffSource:
    """In-memory DiffSource."""

    def __init__(self, files: Optional[list[str]] = None):
        self.files = list(files or [])
        self.diffs: dict[str, FileDiff] = {}
        self.diff_error: Optional[GitError] = None
        self.list_error: Optional[GitError] = None
        self.reverted: list[str] = []

    def add_diff(self, path: str, content: str = "+change", change_kind=ChangeKind.MODIFIED, truncated=False):
        self.diffs[path] = FileDiff(path=path, change_kind=change_kind, content=content, truncated=truncated)
        if path not in self.files:
            self.files.append(path)

    async def list_changed_files(self) -> list[str]:
        if self.list_error:
            raise self.list_error
        return list(self.files)

    async def get_diffs(self, paths: Sequence[str]) -> list[FileDiff]:
        if self.diff_error:
            raise self.diff_error
        return [self.diffs[path] for path in paths if path in self.diffs]

    async def revert(self, path: str) -> None:
        self.reverted.append(path)
        self.files.remove(path)


class FakeProvider(BaseLLMProvider):
    """Provider that answers from a script instead of calling a vendor.

    Each entry of `responses` is either the text to return or a
    ProviderError to raise. Once the script runs out, `default` is used.
    """

    provider = LLMProvider.OPENAI
    display_name = "Fake"

    def __init__(self, responses=None, default="summary", tokens_used: Optional[int] = 10):
        self.responses = list(responses or [])
        self.default = default
        self.tokens_used = tokens_used
        self.prompts: list[str] = []
        self.settings: list[CompletionSettings] = []
        self.before_send = None

    async def _send(self, prompt: str, settings: CompletionSettings):
        self.prompts.append(prompt)
        self.settings.append(settings)
        if self.before_send is not None:
            self.before_send(len(self.prompts))
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, Exception):
            raise response
        return response, self.tokens_used

    def classify_error(self, exc: Exception) -> ProviderError:
        return ProviderError(ErrorKind.UNKNOWN, str(exc))


class FakeGateway:
    """RepositoryGateway that records calls and fails on request."""

    def __init__(self):
        self.staged: list[tuple[str, ...]] = []
        self.commits: list[str] = []
        self.committed_paths: list[tuple[str, ...]] = []
        self.fail_messages: dict[str, GitError] = {}

    async def stage(self, paths: Sequence[str]) -> None:
        self.staged.append(tuple(paths))

    async def commit(self, message: str, paths: Sequence[str]) -> str:
        if message in self.fail_messages:
            raise self.fail_messages[message]
        self.commits.append(message)
        self.committed_paths.append(tuple(paths))
        return f"{len(self.commits):040x}"


@pytest.fixture
def fake_diff_source():
    return FakeDiffSource()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def nothing_to_commit():
    return NothingToCommitError("Nothing to commit: no changes are staged.")


@pytest.fixture
def store(mock_repo_root):
    return WorkspaceStateStore(mock_repo_root)


@pytest.fixture
def machine(store):
    """State machine with a.ts, b.ts and c.ts changed."""
    state_machine = GroupStateMachine(store)
    state_machine.refresh_changed_files(["a.ts", "b.ts", "c.ts"])
    return state_machine


class FakeRepository(FakeDiffSource):
    """DiffSource and RepositoryGateway in one, like GitRepository."""

    def __init__(self, files: Optional[list[str]] = None):
        super().__init__(files)
        self.gateway = FakeGateway()

    async def stage(self, paths: Sequence[str]) -> None:
        await self.gateway.stage(paths)

    async def commit(self, message: str, paths: Sequence[str]) -> str:
        return await self.gateway.commit(message, paths)


@pytest.fixture
def fake_repository():
    return FakeRepository(["a.ts", "b.ts"])


@pytest.fixture
def app_context(mock_repo_root, llm_settings, fake_provider, fake_repository):
    """AppContext wired to in-memory collaborators."""
    context = AppContext.create(
        repo_root=mock_repo_root,
        settings=llm_settings,
        provider=fake_provider,
        repository=fake_repository,
    )
    yield context
    context.close()
