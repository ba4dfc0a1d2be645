"""Google Gemini provider implementation."""

from typing import Optional

from google import genai
from google.genai import errors, types

from llmcommitter.config import LLMProvider
from llmcommitter.llm.base import (
    BaseLLMProvider,
    CompletionSettings,
    classify_status,
    extract_error_message,
)
from llmcommitter.llm.exceptions import ErrorKind, ProviderError

# Models that have built-in "thinking" which consumes output tokens
THINKING_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash-thinking",
]

# Multiplier for max_output_tokens on thinking models
THINKING_TOKEN_MULTIPLIER = 3


def is_thinking_model(model: str) -> bool:
    """Check if a model spends part of its output budget on internal reasoning."""
    return any(thinking_model in model.lower() for thinking_model in THINKING_MODELS)


class GoogleProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    provider = LLMProvider.GEMINI
    display_name = "Gemini"

    async def _send(self, prompt: str, settings: CompletionSettings) -> tuple[str, Optional[int]]:
        client = genai.Client(api_key=settings.api_key)

        max_output_tokens = settings.max_output_tokens
        if is_thinking_model(settings.model):
            max_output_tokens = max_output_tokens * THINKING_TOKEN_MULTIPLIER

        try:
            response = await client.aio.models.generate_content(
                model=settings.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=max_output_tokens,
                    temperature=settings.temperature,
                ),
            )
        finally:
            await client.aio.aclose()

        if response.candidates:
            finish_reason = str(getattr(response.candidates[0], "finish_reason", "") or "")
            if "SAFETY" in finish_reason:
                raise ProviderError(
                    ErrorKind.UNKNOWN,
                    f"Gemini blocked the response due to safety filters: {finish_reason}",
                )

        tokens_used = None
        usage = getattr(response, "usage_metadata", None)
        if usage is not None and usage.total_token_count:
            tokens_used = usage.total_token_count

        return response.text or "", tokens_used

    def classify_error(self, exc: Exception) -> ProviderError:
        message = extract_error_message(exc, "Unknown Gemini error")
        if isinstance(exc, errors.APIError):
            lowered = message.lower()
            if exc.code == 400 and "api key not valid" in lowered:
                return ProviderError(
                    ErrorKind.AUTH,
                    f"Invalid API key. Please check your Gemini API key in settings. ({message})",
                )
            if exc.code == 400 and "resource_exhausted" in lowered:
                return ProviderError(
                    ErrorKind.REQUEST_TOO_LARGE,
                    f"Request too large for the Gemini model. ({message})",
                )
            return classify_status(exc.code, message, self.display_name)
        if isinstance(exc, (ConnectionError, TimeoutError)):
            return classify_status(None, message, self.display_name)
        return ProviderError(ErrorKind.UNKNOWN, f"Gemini API call failed: {message}")
