"""LLM-related exception classes.

Contains the error taxonomy shared by all providers:
- ErrorKind: Classification of upstream failures
- LLMError: Base exception for LLM-related errors
- MissingAPIKeyError: Raised when API key is not set
- ProviderError: A classified vendor failure with a user-facing message
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of a failed provider call."""

    AUTH = "auth"
    RATE_LIMITED = "rate-limited"
    REQUEST_TOO_LARGE = "request-too-large"
    SERVICE_UNAVAILABLE = "service-unavailable"
    UNKNOWN = "unknown"


class LLMError(Exception):
    """Base exception for LLM-related errors."""

    pass


class MissingAPIKeyError(LLMError):
    """Raised when the required API key is not set."""

    pass


class ProviderError(LLMError):
    """A vendor failure classified into the shared taxonomy."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
