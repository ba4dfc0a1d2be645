"""OpenRouter provider implementation.

OpenRouter provides unified access to many models through a single API.
It uses an OpenAI-compatible API format, so this provider reuses the
OpenAI request and error handling with a different base URL.
"""

from typing import Optional

from openai import AsyncOpenAI

from llmcommitter.config import DEFAULT_OPENROUTER_REFERER_URL, LLMProvider
from llmcommitter.llm.base import CompletionSettings
from llmcommitter.llm.openai_provider import OpenAIProvider

# OpenRouter API base URL
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_APP_TITLE = "LLM-Committer"


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter LLM provider."""

    provider = LLMProvider.OPENROUTER
    display_name = "OpenRouter"

    def __init__(self, referer_url: Optional[str] = DEFAULT_OPENROUTER_REFERER_URL):
        """Initialize the OpenRouter provider.

        Args:
            referer_url: Sent as the HTTP-Referer header, as OpenRouter
                recommends. Omitted when empty.
        """
        self.referer_url = referer_url

    def _create_client(self, settings: CompletionSettings) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=settings.api_key, base_url=OPENROUTER_BASE_URL)

    def _extra_headers(self) -> dict:
        headers = {"X-Title": OPENROUTER_APP_TITLE}
        if self.referer_url:
            headers["HTTP-Referer"] = self.referer_url
        return headers
