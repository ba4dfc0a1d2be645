"""Generation pipeline data models.

Contains:
- FileSummary: Phase one output for one file
- GenerationResult: Outcome of a whole generation
- ProgressStage / GenerationProgress: Advisory progress events
- CancellationToken: Cooperative cancellation flag
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from llmcommitter.llm.exceptions import ErrorKind


@dataclass(frozen=True)
class FileSummary:
    """Short description of one file's change."""

    path: str
    summary: str
    failed: bool = False


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one commit message generation.

    Attributes:
        success: Whether a message was produced.
        message: The trimmed commit message.
        error: User-facing error message on failure.
        error_kind: Classification of a provider failure.
        tokens_used: Provider-reported tokens, None if no provider reported usage.
        truncated: Whether any diff was cut to fit the length cap.
        cancelled: Whether the generation was cancelled before finishing.
    """

    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    tokens_used: Optional[int] = None
    truncated: bool = False
    cancelled: bool = False


class ProgressStage(str, Enum):
    STARTED = "started"
    SUMMARIZING = "summarizing"
    SYNTHESIZING = "synthesizing"
    FINISHED = "finished"


@dataclass(frozen=True)
class GenerationProgress:
    """One progress event. Advisory only."""

    stage: ProgressStage
    current: int = 0
    total: int = 0
    path: Optional[str] = None
    success: Optional[bool] = None

    @property
    def description(self) -> str:
        if self.stage == ProgressStage.SUMMARIZING:
            return f"Summarizing file {self.current}/{self.total}: {self.path}"
        if self.stage == ProgressStage.SYNTHESIZING:
            return "Synthesizing commit message"
        if self.stage == ProgressStage.FINISHED:
            return "Finished" if self.success else "Failed"
        return f"Started ({self.total} file(s))"


class CancellationToken:
    """Flag checked by the pipeline between steps."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
