"""OpenAI provider implementation."""

from typing import Optional

import openai
from openai import AsyncOpenAI

from llmcommitter.config import LLMProvider
from llmcommitter.llm.base import (
    BaseLLMProvider,
    CompletionSettings,
    classify_status,
    extract_error_message,
)
from llmcommitter.llm.exceptions import ErrorKind, ProviderError


class OpenAIProvider(BaseLLMProvider):
    """OpenAI chat completions provider."""

    provider = LLMProvider.OPENAI
    display_name = "OpenAI"

    def _create_client(self, settings: CompletionSettings) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=settings.api_key)

    def _extra_headers(self) -> dict:
        return {}

    async def _send(self, prompt: str, settings: CompletionSettings) -> tuple[str, Optional[int]]:
        async with self._create_client(settings) as client:
            response = await client.chat.completions.create(
                model=settings.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=settings.max_output_tokens,
                temperature=settings.temperature,
                extra_headers=self._extra_headers() or None,
            )

        if not response.choices:
            raise ProviderError(ErrorKind.UNKNOWN, f"No response generated from {self.display_name}")

        text = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else None
        return text, tokens_used

    def classify_error(self, exc: Exception) -> ProviderError:
        message = extract_error_message(exc, f"Unknown {self.display_name} error")
        if isinstance(exc, openai.APIStatusError):
            return classify_status(exc.status_code, message, self.display_name)
        if isinstance(exc, openai.APIConnectionError):
            return classify_status(None, message, self.display_name)
        return ProviderError(ErrorKind.UNKNOWN, f"{self.display_name} API call failed: {message}")
