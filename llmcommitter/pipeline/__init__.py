"""Commit message generation pipeline.

This package turns changed files into commit messages:
- models: FileSummary, GenerationResult, ProgressStage, GenerationProgress,
          CancellationToken
- tokens: estimate_tokens, prompt_token_limit, estimate_prompt, TokenEstimate
- generator: GenerationPipeline
"""

from llmcommitter.pipeline.models import (
    CancellationToken,
    FileSummary,
    GenerationProgress,
    GenerationResult,
    ProgressStage,
)
from llmcommitter.pipeline.tokens import (
    TokenEstimate,
    estimate_prompt,
    estimate_tokens,
    prompt_token_limit,
)
from llmcommitter.pipeline.generator import (
    NO_DIFFS_ERROR,
    SUMMARY_PLACEHOLDER,
    GenerationPipeline,
)


__all__ = [
    # Models
    "CancellationToken",
    "FileSummary",
    "GenerationProgress",
    "GenerationResult",
    "ProgressStage",
    # Tokens
    "TokenEstimate",
    "estimate_prompt",
    "estimate_tokens",
    "prompt_token_limit",
    # Generator
    "NO_DIFFS_ERROR",
    "SUMMARY_PLACEHOLDER",
    "GenerationPipeline",
]
