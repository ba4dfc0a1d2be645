"""Anthropic Claude provider implementation."""

from typing import Optional

import anthropic
from anthropic import AsyncAnthropic

from llmcommitter.config import LLMProvider
from llmcommitter.llm.base import (
    BaseLLMProvider,
    CompletionSettings,
    classify_status,
    extract_error_message,
)
from llmcommitter.llm.exceptions import ErrorKind, ProviderError


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    provider = LLMProvider.ANTHROPIC
    display_name = "Anthropic"

    async def _send(self, prompt: str, settings: CompletionSettings) -> tuple[str, Optional[int]]:
        async with AsyncAnthropic(api_key=settings.api_key) as client:
            message = await client.messages.create(
                model=settings.model,
                max_tokens=settings.max_output_tokens,
                temperature=settings.temperature,
                messages=[{"role": "user", "content": prompt}],
            )

        if not message.content:
            raise ProviderError(ErrorKind.UNKNOWN, "No response generated from Anthropic")

        text = getattr(message.content[0], "text", "") or ""
        tokens_used = None
        if message.usage:
            tokens_used = message.usage.input_tokens + message.usage.output_tokens
        return text, tokens_used

    def classify_error(self, exc: Exception) -> ProviderError:
        message = extract_error_message(exc, "Unknown Anthropic error")
        if isinstance(exc, anthropic.APIStatusError):
            return classify_status(exc.status_code, message, self.display_name)
        if isinstance(exc, anthropic.APIConnectionError):
            return classify_status(None, message, self.display_name)
        return ProviderError(ErrorKind.UNKNOWN, f"Anthropic API call failed: {message}")
