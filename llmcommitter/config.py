"""Configuration for llmcommitter LLM providers.

Configuration is loaded from ~/.llmcommitter/config.yaml and the
credentials file next to it. Use 'llmcommitter config' commands to
modify settings.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LLMProvider(Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.llmcommitter/config.yaml doesn't set them

DEFAULT_PROVIDER = LLMProvider.OPENAI
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.3
DEFAULT_OPENROUTER_REFERER_URL = "http://localhost"

MIN_MAX_TOKENS = 1000
MAX_MAX_TOKENS = 8000

# Output ceilings for the individual requests of a generation run
SUMMARY_MAX_OUTPUT_TOKENS = 200
SYNTHESIS_MAX_OUTPUT_TOKENS = 150
CONNECTION_TEST_MAX_OUTPUT_TOKENS = 10

# Share of max_tokens the prompt may use; the rest is left for the response
PROMPT_BUDGET_RATIO = 0.95

DEFAULT_INSTRUCTIONS = """You are an expert software engineer writing git commit messages.
Write a concise commit message for the changes described below.
- First line: imperative mood summary of at most 72 characters.
- Optionally follow with a blank line and a short body explaining what changed and why.
- Only describe changes that are actually present. Do not invent details.
- Output only the commit message, without markdown fences or commentary."""


# ============================================================
# MODELS PER PROVIDER
# ============================================================

DEFAULT_MODELS = {
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-latest",
    LLMProvider.GEMINI: "gemini-2.0-flash",
    LLMProvider.OPENROUTER: "openrouter/auto",
}

AVAILABLE_MODELS = {
    LLMProvider.OPENAI: [
        "gpt-4o-mini",
        "gpt-4o",
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4-turbo",
    ],
    LLMProvider.ANTHROPIC: [
        "claude-3-5-haiku-latest",
        "claude-3-5-sonnet-latest",
        "claude-sonnet-4-20250514",
        "claude-3-opus-latest",
    ],
    LLMProvider.GEMINI: [
        "gemini-2.0-flash",
        "gemini-2.0-flash-lite",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    ],
    LLMProvider.OPENROUTER: [
        # Special value for OpenRouter's model routing
        "openrouter/auto",
        "openai/gpt-4o-mini",
        "openai/gpt-4o",
        "anthropic/claude-3.5-sonnet",
        "anthropic/claude-3-haiku",
        "google/gemini-flash-1.5",
        "mistralai/mistral-large",
        "meta-llama/llama-3.3-70b-instruct",
    ],
}

# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GEMINI: "GEMINI_API_KEY",
    LLMProvider.OPENROUTER: "OPENROUTER_API_KEY",
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    """Get the environment variable name for the API key.

    Args:
        provider: The LLM provider.

    Returns:
        The environment variable name.
    """
    return API_KEY_ENV_VARS[provider]


@dataclass(frozen=True)
class LLMSettings:
    """Resolved LLM settings for one session."""

    provider: LLMProvider = DEFAULT_PROVIDER
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    instructions: str = DEFAULT_INSTRUCTIONS
    api_key: str = ""
    openrouter_referer_url: str = DEFAULT_OPENROUTER_REFERER_URL

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())


def clamp_max_tokens(value: int) -> int:
    """Clamp a max_tokens value to the supported range."""
    return max(MIN_MAX_TOKENS, min(MAX_MAX_TOKENS, int(value)))


def clamp_temperature(value: float) -> float:
    """Clamp a temperature value to [0, 1]."""
    return max(0.0, min(1.0, float(value)))


def resolve_api_key(provider: LLMProvider) -> str:
    """Resolve the API key for a provider.

    Checks in order:
    1. Environment variable
    2. ~/.llmcommitter/credentials file

    Args:
        provider: The LLM provider.

    Returns:
        The API key, or an empty string if none is configured.
    """
    env_var = API_KEY_ENV_VARS[provider]
    api_key = os.getenv(env_var)
    if api_key:
        return api_key

    # Import here to avoid circular dependency
    from llmcommitter import global_config

    return global_config.get_credential(env_var) or ""


def load_settings(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
) -> LLMSettings:
    """Load LLM settings from the global config file.

    Missing values fall back to the defaults above. Explicit arguments
    override the configured provider and model.

    Args:
        provider: Optional provider override.
        model: Optional model override.

    Returns:
        An immutable LLMSettings value.
    """
    from llmcommitter import global_config

    configured_provider = global_config.get_active_provider()
    configured_model = global_config.get_active_model()

    active_provider = provider or configured_provider or DEFAULT_PROVIDER
    if model:
        active_model = model
    elif configured_model and (provider is None or provider == configured_provider):
        active_model = configured_model
    else:
        active_model = DEFAULT_MODELS[active_provider]

    max_tokens = global_config.get_max_tokens()
    temperature = global_config.get_temperature()

    return LLMSettings(
        provider=active_provider,
        model=active_model,
        max_tokens=clamp_max_tokens(max_tokens if max_tokens is not None else DEFAULT_MAX_TOKENS),
        temperature=clamp_temperature(temperature if temperature is not None else DEFAULT_TEMPERATURE),
        instructions=global_config.get_instructions() or DEFAULT_INSTRUCTIONS,
        api_key=resolve_api_key(active_provider),
        openrouter_referer_url=(
            global_config.get_openrouter_referer_url() or DEFAULT_OPENROUTER_REFERER_URL
        ),
    )
