"""Base classes and shared utilities for LLM providers.

Every provider satisfies the same contract:
- complete(prompt, settings) -> CompletionResult
- test_connection(settings) -> ConnectionResult

Neither method raises for upstream failures. Vendor exceptions are
classified into the shared ErrorKind taxonomy and returned as failed
results with a message suitable for direct display.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import ClassVar, Optional

from loguru import logger

from llmcommitter.config import (
    CONNECTION_TEST_MAX_OUTPUT_TOKENS,
    LLMProvider,
    LLMSettings,
)
from llmcommitter.llm.exceptions import ErrorKind, ProviderError

CONNECTION_TEST_PROMPT = 'Test connection. Respond with "OK".'

# Phrases vendors use in 400 responses when the prompt exceeds the context window
CONTEXT_LENGTH_MARKERS = (
    "maximum context length",
    "context_length_exceeded",
    "context length",
    "too long",
)


@dataclass(frozen=True)
class CompletionSettings:
    """Settings bundle passed with every completion request."""

    model: str
    temperature: float
    max_output_tokens: int
    api_key: str

    @classmethod
    def from_llm_settings(cls, settings: LLMSettings, max_output_tokens: int) -> "CompletionSettings":
        return cls(
            model=settings.model,
            temperature=settings.temperature,
            max_output_tokens=min(max_output_tokens, settings.max_tokens),
            api_key=settings.api_key,
        )


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of one completion request."""

    success: bool
    text: Optional[str] = None
    tokens_used: Optional[int] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a connection test."""

    success: bool
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None


def extract_error_message(exc: Exception, fallback: str) -> str:
    """Pull the most specific message out of a vendor SDK exception.

    Args:
        exc: The exception raised by the SDK.
        fallback: Message used when nothing better is available.

    Returns:
        The error message.
    """
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    return str(exc) or fallback


def classify_status(status: Optional[int], message: str, vendor: str) -> ProviderError:
    """Map an HTTP status code and message onto the shared taxonomy.

    Args:
        status: HTTP status code, or None if the request never got a response.
        message: The vendor's error message.
        vendor: Human-readable vendor name used in the message.

    Returns:
        A ProviderError with a user-facing message.
    """
    if status in (401, 403):
        if status == 401:
            text = f"Invalid API key. Please check your {vendor} API key in settings."
        else:
            text = f"Forbidden. Your {vendor} API key might not have the right permissions or access level."
        return ProviderError(ErrorKind.AUTH, f"{text} ({message})")
    if status == 429:
        return ProviderError(
            ErrorKind.RATE_LIMITED,
            f"Rate limit exceeded or quota reached for {vendor}. Please try again later. ({message})",
        )
    if status in (400, 413):
        lowered = message.lower()
        if status == 413 or any(marker in lowered for marker in CONTEXT_LENGTH_MARKERS):
            return ProviderError(
                ErrorKind.REQUEST_TOO_LARGE,
                f"Request too large for the {vendor} model. ({message})",
            )
        return ProviderError(ErrorKind.UNKNOWN, f"Bad request to {vendor}: {message}")
    if status in (500, 502, 503, 504, 529):
        return ProviderError(
            ErrorKind.SERVICE_UNAVAILABLE,
            f"{vendor} service temporarily unavailable. ({message})",
        )
    if status is None:
        return ProviderError(
            ErrorKind.SERVICE_UNAVAILABLE,
            f"Could not reach {vendor}. ({message})",
        )
    return ProviderError(ErrorKind.UNKNOWN, f"{vendor} API error ({status}): {message}")


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers."""

    provider: ClassVar[LLMProvider]
    display_name: ClassVar[str]

    async def complete(self, prompt: str, settings: CompletionSettings) -> CompletionResult:
        """Send one prompt and return the generated text.

        Args:
            prompt: The full user prompt.
            settings: Model, temperature, output ceiling and API key.

        Returns:
            A CompletionResult. Failures carry an ErrorKind and message.
        """
        if not settings.api_key.strip():
            return CompletionResult(
                success=False,
                error_kind=ErrorKind.AUTH,
                error=f"API key not configured for {self.display_name}. Please set it up in settings.",
            )

        logger.debug(
            f"Calling {self.display_name} API. Model: {settings.model}, "
            f"Max Response Tokens: {settings.max_output_tokens}"
        )
        try:
            text, tokens_used = await self._send(prompt, settings)
        except ProviderError as e:
            error = e
        except Exception as e:
            error = self.classify_error(e)
        else:
            text = (text or "").strip()
            if text:
                return CompletionResult(success=True, text=text, tokens_used=tokens_used)
            error = ProviderError(ErrorKind.UNKNOWN, f"Empty response from {self.display_name}")

        logger.debug(f"{self.display_name} call failed ({error.kind.value}): {error.message}")
        return CompletionResult(success=False, error_kind=error.kind, error=error.message)

    async def test_connection(self, settings: CompletionSettings) -> ConnectionResult:
        """Issue a minimal round-trip call to verify credentials and model.

        Args:
            settings: The settings to test.

        Returns:
            A ConnectionResult.
        """
        test_settings = replace(
            settings,
            temperature=0.0,
            max_output_tokens=CONNECTION_TEST_MAX_OUTPUT_TOKENS,
        )
        result = await self.complete(CONNECTION_TEST_PROMPT, test_settings)
        if result.success:
            logger.debug(f"{self.display_name} connection test successful")
        return ConnectionResult(
            success=result.success,
            error_kind=result.error_kind,
            error=result.error,
        )

    @abstractmethod
    async def _send(self, prompt: str, settings: CompletionSettings) -> tuple[str, Optional[int]]:
        """Perform the vendor request.

        Returns:
            Tuple of (generated text, total tokens used or None when the
            vendor does not report usage).

        Raises:
            ProviderError: For failures detected while reading the response.
            Exception: Any vendor SDK exception; classify_error maps it.
        """
        pass

    @abstractmethod
    def classify_error(self, exc: Exception) -> ProviderError:
        """Map a vendor SDK exception onto the shared taxonomy."""
        pass
