"""Tests for LLM provider modules."""

import asyncio
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from llmcommitter.config import LLMProvider
from llmcommitter.llm import get_provider
from llmcommitter.llm.base import CompletionSettings
from llmcommitter.llm.exceptions import ErrorKind

REQUEST = httpx.Request("POST", "https://api.example.com/v1")


def _response(status):
    return httpx.Response(status, request=REQUEST)


@pytest.fixture
def settings():
    return CompletionSettings(model="some-model", temperature=0.3, max_output_tokens=150, api_key="key")


def _enter_as_self(client):
    """Make a mocked SDK client usable as its own async context manager."""
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False


class TestGetProvider:
    """Tests for get_provider factory function."""

    def test_returns_openai_provider(self):
        """Test getting OpenAI provider."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        assert isinstance(get_provider(LLMProvider.OPENAI), OpenAIProvider)

    def test_returns_anthropic_provider(self):
        """Test getting Anthropic provider."""
        from llmcommitter.llm.anthropic_provider import AnthropicProvider

        assert isinstance(get_provider(LLMProvider.ANTHROPIC), AnthropicProvider)

    def test_returns_google_provider(self):
        """Test getting Gemini provider."""
        from llmcommitter.llm.google_provider import GoogleProvider

        assert isinstance(get_provider(LLMProvider.GEMINI), GoogleProvider)

    def test_returns_openrouter_provider(self):
        """Test getting OpenRouter provider with its referer."""
        from llmcommitter.llm.openrouter_provider import OpenRouterProvider

        provider = get_provider(LLMProvider.OPENROUTER, referer_url="https://example.com")

        assert isinstance(provider, OpenRouterProvider)
        assert provider.referer_url == "https://example.com"

    def test_unsupported_provider_raises_error(self):
        """Test that unsupported provider raises ValueError."""
        with pytest.raises(ValueError) as exc_info:
            get_provider("invalid_provider")
        assert "Unsupported provider" in str(exc_info.value)


class TestOpenAIProvider:
    """Tests for OpenAIProvider."""

    def _mock_client(self, mocker, module, response=None, error=None):
        client_class = mocker.patch(f"llmcommitter.llm.{module}.AsyncOpenAI")
        _enter_as_self(client_class.return_value)
        create = mocker.AsyncMock(return_value=response, side_effect=error)
        client_class.return_value.chat.completions.create = create
        return client_class, create

    def test_complete(self, mocker, settings):
        """Test a chat completion with total token usage."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=" fix: bug "))],
            usage=SimpleNamespace(total_tokens=42),
        )
        client_class, create = self._mock_client(mocker, "openai_provider", response)

        result = asyncio.run(OpenAIProvider().complete("prompt", settings))

        assert result.success is True
        assert result.text == "fix: bug"
        assert result.tokens_used == 42
        client_class.assert_called_once_with(api_key="key")
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "some-model"
        assert kwargs["max_tokens"] == 150
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    def test_missing_usage(self, mocker, settings):
        """Test that a response without usage reports no tokens."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="ok"))], usage=None
        )
        self._mock_client(mocker, "openai_provider", response)

        result = asyncio.run(OpenAIProvider().complete("prompt", settings))

        assert result.tokens_used is None

    def test_no_choices(self, mocker, settings):
        """Test that an empty choice list is a failure."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        self._mock_client(mocker, "openai_provider", SimpleNamespace(choices=[], usage=None))

        result = asyncio.run(OpenAIProvider().complete("prompt", settings))

        assert result.success is False
        assert result.error_kind == ErrorKind.UNKNOWN

    @pytest.mark.parametrize(
        "status,message,kind",
        [
            (401, "Incorrect API key provided", ErrorKind.AUTH),
            (429, "Rate limit reached", ErrorKind.RATE_LIMITED),
            (400, "This model's maximum context length is 128000 tokens", ErrorKind.REQUEST_TOO_LARGE),
            (503, "overloaded", ErrorKind.SERVICE_UNAVAILABLE),
        ],
    )
    def test_status_errors(self, mocker, settings, status, message, kind):
        """Test that SDK status errors are classified."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        error = openai.APIStatusError(message, response=_response(status), body=None)
        self._mock_client(mocker, "openai_provider", error=error)

        result = asyncio.run(OpenAIProvider().complete("prompt", settings))

        assert result.success is False
        assert result.error_kind == kind
        assert message in result.error

    def test_client_closed_after_request(self, mocker, settings):
        """Test that the SDK client is closed even when the request fails."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        client_class, _ = self._mock_client(
            mocker, "openai_provider", error=openai.APIConnectionError(request=REQUEST)
        )

        asyncio.run(OpenAIProvider().complete("prompt", settings))

        client_class.return_value.__aenter__.assert_awaited_once()
        client_class.return_value.__aexit__.assert_awaited_once()

    def test_connection_error(self, mocker, settings):
        """Test that connection failures are service-unavailable."""
        from llmcommitter.llm.openai_provider import OpenAIProvider

        self._mock_client(mocker, "openai_provider", error=openai.APIConnectionError(request=REQUEST))

        result = asyncio.run(OpenAIProvider().complete("prompt", settings))

        assert result.error_kind == ErrorKind.SERVICE_UNAVAILABLE

    def test_openrouter_uses_base_url_and_headers(self, mocker, settings):
        """Test the OpenRouter endpoint and attribution headers."""
        from llmcommitter.llm.openrouter_provider import OPENROUTER_BASE_URL, OpenRouterProvider

        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="ok"))],
            usage=SimpleNamespace(total_tokens=3),
        )
        client_class, create = self._mock_client(mocker, "openrouter_provider", response)

        result = asyncio.run(OpenRouterProvider(referer_url="https://me.dev").complete("prompt", settings))

        assert result.success is True
        client_class.assert_called_once_with(api_key="key", base_url=OPENROUTER_BASE_URL)
        headers = create.call_args.kwargs["extra_headers"]
        assert headers["HTTP-Referer"] == "https://me.dev"
        assert headers["X-Title"] == "LLM-Committer"


class TestAnthropicProvider:
    """Tests for AnthropicProvider."""

    def _mock_client(self, mocker, response=None, error=None):
        client_class = mocker.patch("llmcommitter.llm.anthropic_provider.AsyncAnthropic")
        _enter_as_self(client_class.return_value)
        create = mocker.AsyncMock(return_value=response, side_effect=error)
        client_class.return_value.messages.create = create
        self.client = client_class.return_value
        return create

    def test_complete(self, mocker, settings):
        """Test a message with input plus output token usage."""
        from llmcommitter.llm.anthropic_provider import AnthropicProvider

        response = SimpleNamespace(
            content=[SimpleNamespace(text="feat: add")],
            usage=SimpleNamespace(input_tokens=30, output_tokens=5),
        )
        create = self._mock_client(mocker, response)

        result = asyncio.run(AnthropicProvider().complete("prompt", settings))

        assert result.text == "feat: add"
        assert result.tokens_used == 35
        assert create.call_args.kwargs["max_tokens"] == 150

    def test_client_closed_after_request(self, mocker, settings):
        """Test that the SDK client is closed after the call."""
        from llmcommitter.llm.anthropic_provider import AnthropicProvider

        self._mock_client(mocker, SimpleNamespace(content=[SimpleNamespace(text="ok")], usage=None))

        asyncio.run(AnthropicProvider().complete("prompt", settings))

        self.client.__aexit__.assert_awaited_once()

    def test_status_error(self, mocker, settings):
        """Test classification of an Anthropic error body."""
        from llmcommitter.llm.anthropic_provider import AnthropicProvider

        error = anthropic.APIStatusError(
            "Error code: 401",
            response=_response(401),
            body={"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}},
        )
        self._mock_client(mocker, error=error)

        result = asyncio.run(AnthropicProvider().complete("prompt", settings))

        assert result.error_kind == ErrorKind.AUTH
        assert "invalid x-api-key" in result.error


class TestGoogleProvider:
    """Tests for GoogleProvider."""

    def _mock_client(self, mocker, response=None, error=None):
        client_class = mocker.patch("llmcommitter.llm.google_provider.genai.Client")
        generate = mocker.AsyncMock(return_value=response, side_effect=error)
        client_class.return_value.aio.models.generate_content = generate
        client_class.return_value.aio.aclose = mocker.AsyncMock()
        self.client = client_class.return_value
        return generate

    def _response(self, text, usage=None, finish_reason="STOP"):
        return SimpleNamespace(
            text=text,
            candidates=[SimpleNamespace(finish_reason=finish_reason)],
            usage_metadata=usage,
        )

    def test_complete_with_usage(self, mocker, settings):
        """Test usage taken from usage_metadata."""
        from llmcommitter.llm.google_provider import GoogleProvider

        generate = self._mock_client(
            mocker, self._response("docs: update", SimpleNamespace(total_token_count=17))
        )

        result = asyncio.run(GoogleProvider().complete("prompt", settings))

        assert result.text == "docs: update"
        assert result.tokens_used == 17
        assert generate.call_args.kwargs["contents"] == "prompt"

    def test_client_closed_after_request(self, mocker, settings):
        """Test that the async client is closed even when the request fails."""
        from llmcommitter.llm.google_provider import GoogleProvider

        error = genai_errors.APIError(503, {"error": {"code": 503, "message": "down", "status": "X"}})
        self._mock_client(mocker, error=error)

        asyncio.run(GoogleProvider().complete("prompt", settings))

        self.client.aio.aclose.assert_awaited_once()

    def test_usage_absent(self, mocker, settings):
        """Test that missing usage metadata is omitted."""
        from llmcommitter.llm.google_provider import GoogleProvider

        self._mock_client(mocker, self._response("ok"))

        result = asyncio.run(GoogleProvider().complete("prompt", settings))

        assert result.success is True
        assert result.tokens_used is None

    def test_thinking_model_gets_larger_budget(self, mocker, settings):
        """Test the output budget multiplier for thinking models."""
        from dataclasses import replace

        from llmcommitter.llm.google_provider import THINKING_TOKEN_MULTIPLIER, GoogleProvider

        generate = self._mock_client(mocker, self._response("ok"))

        asyncio.run(GoogleProvider().complete("prompt", replace(settings, model="gemini-2.5-flash")))

        config = generate.call_args.kwargs["config"]
        assert config.max_output_tokens == 150 * THINKING_TOKEN_MULTIPLIER

    def test_safety_block(self, mocker, settings):
        """Test that a safety-blocked response fails."""
        from llmcommitter.llm.google_provider import GoogleProvider

        self._mock_client(mocker, self._response("", finish_reason="FinishReason.SAFETY"))

        result = asyncio.run(GoogleProvider().complete("prompt", settings))

        assert result.success is False
        assert "safety" in result.error

    @pytest.mark.parametrize(
        "code,message,kind",
        [
            (400, "API key not valid. Please pass a valid API key.", ErrorKind.AUTH),
            (400, "RESOURCE_EXHAUSTED: input too large", ErrorKind.REQUEST_TOO_LARGE),
            (400, "The input context length exceeds the limit", ErrorKind.REQUEST_TOO_LARGE),
            (400, "Invalid argument", ErrorKind.UNKNOWN),
            (429, "Quota exceeded", ErrorKind.RATE_LIMITED),
            (503, "The model is overloaded", ErrorKind.SERVICE_UNAVAILABLE),
        ],
    )
    def test_api_errors(self, mocker, settings, code, message, kind):
        """Test Gemini error classification."""
        from llmcommitter.llm.google_provider import GoogleProvider

        error = genai_errors.APIError(code, {"error": {"code": code, "message": message, "status": "X"}})
        self._mock_client(mocker, error=error)

        result = asyncio.run(GoogleProvider().complete("prompt", settings))

        assert result.error_kind == kind
