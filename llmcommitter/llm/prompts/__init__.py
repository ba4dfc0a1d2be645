"""LLM prompt templates for commit message generation.

This package contains the prompts for the two generation phases:
- summary: Short description of a single file's change
- synthesis: One commit message built from the per-file summaries
"""

from llmcommitter.llm.prompts.summary import (
    FILE_SUMMARY_PROMPT_TEMPLATE,
    build_summary_prompt,
)
from llmcommitter.llm.prompts.synthesis import (
    SYNTHESIS_CLOSING_LINE,
    build_synthesis_prompt,
)


__all__ = [
    "FILE_SUMMARY_PROMPT_TEMPLATE",
    "SYNTHESIS_CLOSING_LINE",
    "build_summary_prompt",
    "build_synthesis_prompt",
]
