"""LLM provider module for llmcommitter.

This module provides a unified interface to multiple LLM providers.
The active provider is read from the global configuration.
"""

from typing import Optional

from dotenv import load_dotenv

from llmcommitter.config import DEFAULT_OPENROUTER_REFERER_URL, LLMProvider
from llmcommitter.llm.base import (
    BaseLLMProvider,
    CompletionResult,
    CompletionSettings,
    ConnectionResult,
)
from llmcommitter.llm.exceptions import (
    ErrorKind,
    LLMError,
    MissingAPIKeyError,
    ProviderError,
)

# Load environment variables from .env file
load_dotenv()


def get_provider(
    provider: LLMProvider,
    referer_url: Optional[str] = DEFAULT_OPENROUTER_REFERER_URL,
) -> BaseLLMProvider:
    """Get an LLM provider instance.

    Args:
        provider: The provider to use.
        referer_url: HTTP-Referer sent to OpenRouter. Ignored by other providers.

    Returns:
        An instance of the appropriate LLM provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if provider == LLMProvider.OPENAI:
        from llmcommitter.llm.openai_provider import OpenAIProvider

        return OpenAIProvider()

    elif provider == LLMProvider.ANTHROPIC:
        from llmcommitter.llm.anthropic_provider import AnthropicProvider

        return AnthropicProvider()

    elif provider == LLMProvider.GEMINI:
        from llmcommitter.llm.google_provider import GoogleProvider

        return GoogleProvider()

    elif provider == LLMProvider.OPENROUTER:
        from llmcommitter.llm.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(referer_url=referer_url)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


__all__ = [
    "BaseLLMProvider",
    "CompletionResult",
    "CompletionSettings",
    "ConnectionResult",
    "ErrorKind",
    "LLMError",
    "MissingAPIKeyError",
    "ProviderError",
    "get_provider",
]
