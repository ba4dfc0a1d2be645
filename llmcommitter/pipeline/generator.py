"""Two-phase commit message generation.

Contains:
- SUMMARY_PLACEHOLDER: Summary used when a file could not be summarized
- GenerationPipeline: Summarize each file, then synthesize one message

Phase one asks the provider for a short summary of every file, strictly
in order. A failed or over-budget summary becomes a placeholder and the
pipeline moves on. Phase two combines the summaries with the general and
group context into a single commit message. A failure there, or a
synthesis prompt over the token budget, fails the generation.
"""

from typing import Optional, Sequence

from loguru import logger

from llmcommitter.config import (
    SUMMARY_MAX_OUTPUT_TOKENS,
    SYNTHESIS_MAX_OUTPUT_TOKENS,
    LLMSettings,
)
from llmcommitter.events import EventChannel
from llmcommitter.git.exceptions import GitError
from llmcommitter.git.models import DiffSource
from llmcommitter.llm.base import BaseLLMProvider, CompletionSettings
from llmcommitter.llm.exceptions import ErrorKind
from llmcommitter.llm.prompts import build_summary_prompt, build_synthesis_prompt
from llmcommitter.pipeline.models import (
    CancellationToken,
    FileSummary,
    GenerationProgress,
    GenerationResult,
    ProgressStage,
)
from llmcommitter.pipeline.tokens import TokenEstimate, estimate_prompt

SUMMARY_PLACEHOLDER = "Could not summarize changes for {path}."
NO_DIFFS_ERROR = "No file diffs found for selected files."
REQUEST_TOO_LARGE_ERROR = (
    "Request too large for the configured token budget "
    "(estimated {estimated} tokens, limit {limit}). "
    "Select fewer files, shorten the context, or raise max_tokens."
)


def _preview(text: str, limit: int = 100) -> str:
    if not text:
        return "N/A"
    return text[:limit] + ("..." if len(text) > limit else "")


class GenerationPipeline:
    """Turns a set of changed files plus context into one commit message."""

    def __init__(self, diff_source: DiffSource, provider: BaseLLMProvider, settings: LLMSettings):
        self.diff_source = diff_source
        self.provider = provider
        self.settings = settings
        self.progress: EventChannel[GenerationProgress] = EventChannel("generation")

    def _emit(self, stage: ProgressStage, **kwargs) -> None:
        self.progress.emit(GenerationProgress(stage=stage, **kwargs))

    def _over_budget(self, prompt: str, label: str) -> Optional[TokenEstimate]:
        """Return the estimate if prompt does not fit the budget, else None."""
        estimate = estimate_prompt(prompt, self.settings.max_tokens)
        if estimate.within_limit:
            return None
        logger.warning(
            f"Prompt for {label} is estimated at {estimate.estimated} tokens, "
            f"over the {estimate.limit} token budget; not sending it"
        )
        return estimate

    async def generate(
        self,
        files: Sequence[str],
        general_context: str = "",
        specific_context: str = "",
        token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate a commit message for files.

        Args:
            files: Repo-relative paths, in the order they are summarized.
            general_context: Workspace-wide context.
            specific_context: Context for this group only.
            token: Checked between steps; a cancelled run returns early.

        Returns:
            A GenerationResult. Never raises for provider or git failures.
        """
        token = token or CancellationToken()
        self._emit(ProgressStage.STARTED, total=len(files))
        result = await self._generate(list(files), general_context, specific_context, token)
        self._emit(ProgressStage.FINISHED, success=result.success)
        return result

    async def _generate(
        self,
        files: list[str],
        general_context: str,
        specific_context: str,
        token: CancellationToken,
    ) -> GenerationResult:
        settings = self.settings
        if not settings.has_api_key:
            return GenerationResult(
                success=False,
                error=(
                    f"API key not configured for {settings.provider.value}. "
                    "Run 'llmcommitter config set-key' to set it."
                ),
                error_kind=ErrorKind.AUTH,
            )
        if not files:
            return GenerationResult(success=False, error="No files selected for generation.")

        try:
            diffs = await self.diff_source.get_diffs(files)
        except GitError as e:
            logger.error(f"Failed to read diffs: {e}")
            return GenerationResult(success=False, error=f"Failed to read diffs: {e}")

        if not diffs:
            return GenerationResult(success=False, error=NO_DIFFS_ERROR)

        truncated = any(diff.truncated for diff in diffs)
        tokens_used: Optional[int] = None

        def add_tokens(count: Optional[int]) -> None:
            nonlocal tokens_used
            if count is not None:
                tokens_used = (tokens_used or 0) + count

        summary_settings = CompletionSettings.from_llm_settings(settings, SUMMARY_MAX_OUTPUT_TOKENS)
        summaries: list[FileSummary] = []
        for index, diff in enumerate(diffs, start=1):
            if token.cancelled:
                return self._cancelled(tokens_used, truncated)

            self._emit(ProgressStage.SUMMARIZING, current=index, total=len(diffs), path=diff.path)
            prompt = build_summary_prompt(
                settings.instructions,
                general_context,
                diff.path,
                diff.change_kind.value,
                diff.content,
            )
            if self._over_budget(prompt, f"summary of {diff.path}"):
                summary_ok = False
            else:
                result = await self.provider.complete(prompt, summary_settings)
                add_tokens(result.tokens_used)
                summary_ok = result.success
                if not summary_ok:
                    logger.warning(f"Could not summarize {diff.path}: {result.error}")

            if summary_ok:
                summaries.append(FileSummary(path=diff.path, summary=result.text))
            else:
                summaries.append(
                    FileSummary(
                        path=diff.path,
                        summary=SUMMARY_PLACEHOLDER.format(path=diff.path),
                        failed=True,
                    )
                )

        if token.cancelled:
            return self._cancelled(tokens_used, truncated)

        self._emit(ProgressStage.SYNTHESIZING, current=len(diffs), total=len(diffs))
        prompt = build_synthesis_prompt(
            settings.instructions,
            general_context,
            specific_context,
            [(summary.path, summary.summary) for summary in summaries],
        )
        logger.debug(
            f"Synthesis prompt: instructions {len(settings.instructions)} chars, "
            f"general context '{_preview(general_context)}', "
            f"group context '{_preview(specific_context)}', "
            f"{len(summaries)} summaries ({sum(s.failed for s in summaries)} failed), "
            f"{len(prompt)} chars total"
        )
        estimate = self._over_budget(prompt, "synthesis")
        if estimate:
            return GenerationResult(
                success=False,
                error=REQUEST_TOO_LARGE_ERROR.format(estimated=estimate.estimated, limit=estimate.limit),
                error_kind=ErrorKind.REQUEST_TOO_LARGE,
                tokens_used=tokens_used,
                truncated=truncated,
            )

        result = await self.provider.complete(
            prompt, CompletionSettings.from_llm_settings(settings, SYNTHESIS_MAX_OUTPUT_TOKENS)
        )
        add_tokens(result.tokens_used)

        if not result.success:
            logger.error(f"Commit message synthesis failed: {result.error}")
            return GenerationResult(
                success=False,
                error=result.error,
                error_kind=result.error_kind,
                tokens_used=tokens_used,
                truncated=truncated,
            )

        return GenerationResult(
            success=True,
            message=result.text.strip(),
            tokens_used=tokens_used,
            truncated=truncated,
        )

    def _cancelled(self, tokens_used: Optional[int], truncated: bool) -> GenerationResult:
        logger.info("Generation cancelled")
        return GenerationResult(
            success=False,
            error="Generation cancelled.",
            tokens_used=tokens_used,
            truncated=truncated,
            cancelled=True,
        )

    async def generate_for(
        self,
        state_machine,
        group_id: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Generate a message for the draft, or for a staged group, and store it.

        The message is written back only if the run was not cancelled.

        Args:
            state_machine: The GroupStateMachine holding the target.
            group_id: Staged group id, or None for the draft group.
            token: Cancellation token.

        Returns:
            The GenerationResult.
        """
        token = token or CancellationToken()
        state = state_machine.state

        if group_id is None:
            draft = state.draft
            if draft is None:
                return GenerationResult(success=False, error="No draft group to generate a message for.")
            files, specific_context = draft.files, draft.specific_context
            state_machine.set_generating(True)
        else:
            group = state.get_staged_group(group_id)
            if group is None:
                return GenerationResult(success=False, error=f"Staged group {group_id} not found.")
            files, specific_context = group.files, group.specific_context

        try:
            result = await self.generate(files, state.general_context, specific_context, token)
        finally:
            if group_id is None:
                state_machine.set_generating(False)

        if token.cancelled or result.cancelled:
            logger.debug("Skipping write-back of cancelled generation")
            return result

        if result.success:
            if group_id is None:
                stored = state_machine.update_draft_message(result.message)
            else:
                stored = state_machine.update_staged_group(group_id, commit_message=result.message)
            if not stored:
                logger.warning("Generated message could not be stored; its target no longer exists")

        return result
