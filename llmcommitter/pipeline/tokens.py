"""Token budget estimation.

Contains:
- estimate_tokens: Rough token count of a prompt
- prompt_token_limit: Share of max_tokens available to the prompt
- TokenEstimate / estimate_prompt: Both values together

A prompt over the limit is not sent. Providers still report their own
context length errors for prompts that pass the estimate.
"""

import math
from dataclasses import dataclass

from llmcommitter.config import PROMPT_BUDGET_RATIO

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate tokens as ceil(characters / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def prompt_token_limit(max_tokens: int) -> int:
    """Tokens the prompt may use; the remainder is left for the response."""
    # Integer percent keeps floor() exact for round values such as 4000
    return (max_tokens * round(PROMPT_BUDGET_RATIO * 100)) // 100


@dataclass(frozen=True)
class TokenEstimate:
    estimated: int
    limit: int

    @property
    def within_limit(self) -> bool:
        return self.estimated <= self.limit


def estimate_prompt(prompt: str, max_tokens: int) -> TokenEstimate:
    return TokenEstimate(estimated=estimate_tokens(prompt), limit=prompt_token_limit(max_tokens))
