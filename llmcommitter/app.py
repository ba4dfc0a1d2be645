"""Application context.

Contains:
- AppContext: Owns every service for one repository

Services are built explicitly here and nowhere else. One AppContext is
created at startup and closed on shutdown.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from llmcommitter.batch import BatchCommitCoordinator, BatchCommitSummary
from llmcommitter.config import LLMSettings, load_settings
from llmcommitter.git.repository import GitRepository
from llmcommitter.git.runner import get_repo_root
from llmcommitter.llm import get_provider
from llmcommitter.llm.base import BaseLLMProvider, CompletionSettings, ConnectionResult
from llmcommitter.pipeline import CancellationToken, GenerationPipeline, GenerationResult
from llmcommitter.state import (
    AppState,
    GroupStateMachine,
    SettingsSummary,
    WorkspaceStateStore,
)


class AppContext:
    """Wires the state machine, git repository, provider, pipeline and coordinator."""

    def __init__(
        self,
        repo_root: Path,
        settings: LLMSettings,
        repository: GitRepository,
        state_machine: GroupStateMachine,
        provider: BaseLLMProvider,
    ):
        self.repo_root = repo_root
        self.settings = settings
        self.repository = repository
        self.state_machine = state_machine
        self.provider = provider
        self.pipeline = GenerationPipeline(repository, provider, settings)
        self.coordinator = BatchCommitCoordinator(state_machine, repository, repository)
        self._closed = False

    @classmethod
    def create(
        cls,
        repo_root: Optional[Path] = None,
        settings: Optional[LLMSettings] = None,
        provider: Optional[BaseLLMProvider] = None,
        repository: Optional[GitRepository] = None,
    ) -> "AppContext":
        """Build the services for a repository and load its persisted state.

        Args:
            repo_root: Repository root. Defaults to the one containing the cwd.
            settings: LLM settings. Defaults to the global configuration.
            provider: Provider override, mainly for tests.
            repository: Repository override, mainly for tests.

        Raises:
            NotAGitRepositoryError: If no repository is found.
        """
        repo_root = repo_root or get_repo_root()
        settings = settings or load_settings()
        repository = repository or GitRepository(repo_root)
        provider = provider or get_provider(settings.provider, settings.openrouter_referer_url)
        logger.debug(f"Using {settings.provider.value} provider with model {settings.model}")

        state_machine = GroupStateMachine(
            WorkspaceStateStore(repo_root),
            SettingsSummary.from_settings(settings),
        )
        context = cls(repo_root, settings, repository, state_machine, provider)
        state_machine.load()
        return context

    @property
    def state(self) -> AppState:
        return self.state_machine.state

    async def refresh(self) -> AppState:
        """Reload the changed-file list from git."""
        files = await self.repository.list_changed_files()
        return self.state_machine.refresh_changed_files(files)

    async def generate(
        self,
        group_id: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate a message for the draft, or for a staged group."""
        return await self.pipeline.generate_for(self.state_machine, group_id, token)

    async def commit_all(self) -> BatchCommitSummary:
        return await self.coordinator.commit_all()

    async def revert(self, path: str) -> AppState:
        """Discard the changes to one file, then refresh."""
        await self.repository.revert(path)
        return await self.refresh()

    async def test_connection(self) -> ConnectionResult:
        settings = CompletionSettings.from_llm_settings(self.settings, self.settings.max_tokens)
        return await self.provider.test_connection(settings)

    def update_settings(self, settings: LLMSettings) -> None:
        """Switch to new settings, rebuilding the provider if its inputs changed."""
        if (
            settings.provider != self.settings.provider
            or settings.openrouter_referer_url != self.settings.openrouter_referer_url
        ):
            self.provider = get_provider(settings.provider, settings.openrouter_referer_url)
            self.pipeline.provider = self.provider
        self.settings = settings
        self.pipeline.settings = settings
        self.state_machine.update_settings(SettingsSummary.from_settings(settings))

    def close(self) -> None:
        """Drop every listener. Safe to call more than once."""
        if self._closed:
            return
        self.state_machine.changes.clear()
        self.pipeline.progress.clear()
        self.coordinator.events.clear()
        self._closed = True
        logger.debug("Application context closed")

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
