"""Sequential commit of every staged group.

Contains:
- CommitEventKind / CommitEvent: Progress events of a batch
- GroupCommitOutcome: Result for one group
- BatchCommitSummary: Counts and outcomes of a batch
- BatchCommitCoordinator: Stages and commits each group in turn
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from llmcommitter.events import EventChannel
from llmcommitter.git.exceptions import GitError
from llmcommitter.git.models import DiffSource, RepositoryGateway


class CommitEventKind(str, Enum):
    START = "start"
    SUCCESS = "success"
    FAILURE = "failure"
    END = "end"


@dataclass(frozen=True)
class GroupCommitOutcome:
    """What happened to one group."""

    group_id: str
    success: bool
    commit_sha: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BatchCommitSummary:
    success_count: int
    failure_count: int
    outcomes: tuple[GroupCommitOutcome, ...] = ()


@dataclass(frozen=True)
class CommitEvent:
    """One batch progress event."""

    kind: CommitEventKind
    total: int = 0
    index: int = 0
    group_id: Optional[str] = None
    commit_sha: Optional[str] = None
    error: Optional[str] = None
    summary: Optional[BatchCommitSummary] = None


class BatchCommitCoordinator:
    """Commits every staged group, one at a time, without stopping on failure.

    The group list is snapshotted when the batch starts. Each group is
    staged and committed on its own. A committed group is removed from
    the state machine; a failed group stays staged. After the batch the
    changed-file list is refreshed.
    """

    def __init__(
        self,
        state_machine,
        gateway: RepositoryGateway,
        diff_source: Optional[DiffSource] = None,
    ):
        self.state_machine = state_machine
        self.gateway = gateway
        self.diff_source = diff_source
        self.events: EventChannel[CommitEvent] = EventChannel("commit")

    async def commit_all(self) -> BatchCommitSummary:
        """Stage and commit every staged group in order.

        Returns:
            A BatchCommitSummary. Never raises for git failures.
        """
        groups = self.state_machine.state.staged_groups
        total = len(groups)
        self.events.emit(CommitEvent(kind=CommitEventKind.START, total=total))
        logger.info(f"Committing {total} staged group(s)")

        outcomes = []
        for index, group in enumerate(groups, start=1):
            try:
                await self.gateway.stage(group.files)
                commit_sha = await self.gateway.commit(group.commit_message, group.files)
            except GitError as e:
                # NothingToCommitError lands here too and counts as a failure
                error = str(e)
            else:
                self.state_machine.remove_group_by_id(group.id)
                outcomes.append(GroupCommitOutcome(group_id=group.id, success=True, commit_sha=commit_sha))
                logger.info(f"Committed group {index}/{total} as {commit_sha[:12]}")
                self.events.emit(
                    CommitEvent(
                        kind=CommitEventKind.SUCCESS,
                        total=total,
                        index=index,
                        group_id=group.id,
                        commit_sha=commit_sha,
                    )
                )
                continue

            logger.error(f"Failed to commit group {index}/{total}: {error}")
            outcomes.append(GroupCommitOutcome(group_id=group.id, success=False, error=error))
            self.events.emit(
                CommitEvent(
                    kind=CommitEventKind.FAILURE,
                    total=total,
                    index=index,
                    group_id=group.id,
                    error=error,
                )
            )

        success_count = sum(1 for outcome in outcomes if outcome.success)
        summary = BatchCommitSummary(
            success_count=success_count,
            failure_count=len(outcomes) - success_count,
            outcomes=tuple(outcomes),
        )
        self.events.emit(CommitEvent(kind=CommitEventKind.END, total=total, summary=summary))
        logger.info(f"Batch commit finished: {summary.success_count} succeeded, {summary.failure_count} failed")

        await self._refresh_changed_files()
        return summary

    async def _refresh_changed_files(self) -> None:
        if self.diff_source is None:
            return
        try:
            files = await self.diff_source.list_changed_files()
        except GitError as e:
            # An empty snapshot here would auto-unstage every remaining group
            logger.error(f"Failed to refresh changed files after commit: {e}")
            return
        self.state_machine.refresh_changed_files(files)
