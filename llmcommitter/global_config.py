"""Global configuration management for llmcommitter.

Handles user-level configuration stored in ~/.llmcommitter/:
- config.yaml: Provider, model, token budget and instruction settings
- credentials: API keys for LLM providers
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from llmcommitter.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_OPENROUTER_REFERER_URL,
    DEFAULT_PROVIDER,
    DEFAULT_TEMPERATURE,
    LLMProvider,
)


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".llmcommitter"


def get_global_config_dir() -> Path:
    """Get the global llmcommitter configuration directory.

    Returns:
        Path to ~/.llmcommitter/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.llmcommitter/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    """Get path to credentials file."""
    return get_global_config_dir() / "credentials"


def get_log_dir() -> Path:
    """Get the directory holding llmcommitter log files."""
    return get_global_config_dir() / "logs"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from ~/.llmcommitter/config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file exists but cannot be read or parsed.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
        return config
    except Exception as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to ~/.llmcommitter/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except Exception as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def _read_credentials_file(credentials_file: Path) -> Dict[str, str]:
    credentials = {}
    with open(credentials_file, "r") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.llmcommitter/credentials.

    Returns:
        Dictionary mapping environment variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _read_credentials_file(credentials_file)
    except Exception as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(provider_key: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = load_credentials()
    existing_creds[provider_key] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# llmcommitter API credentials\n")
            f.write("# Format: PROVIDER_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        # Owner read/write only
        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)

    except Exception as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(provider_key: str) -> Optional[str]:
    """Get an API key from credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")

    Returns:
        The API key if found, None otherwise.
    """
    credentials = load_credentials()
    return credentials.get(provider_key)


def get_active_provider() -> Optional[LLMProvider]:
    """Get the active LLM provider from global config.

    Returns:
        LLMProvider enum value, or None if not configured or unknown.
    """
    config = load_global_config()
    provider_str = config.get("provider")

    if not provider_str:
        return None

    try:
        return LLMProvider(provider_str)
    except ValueError:
        return None


def get_active_model() -> Optional[str]:
    """Get the active model from global config."""
    config = load_global_config()
    return config.get("model")


def set_provider_and_model(provider: LLMProvider, model: str) -> None:
    """Set the active provider and model in global config.

    Args:
        provider: The LLM provider to use.
        model: The model name to use.
    """
    config = load_global_config()
    config["provider"] = provider.value
    config["model"] = model
    save_global_config(config)


def get_max_tokens() -> Optional[int]:
    """Get max_tokens setting from global config."""
    config = load_global_config()
    return config.get("max_tokens")


def get_temperature() -> Optional[float]:
    """Get temperature setting from global config."""
    config = load_global_config()
    return config.get("temperature")


def get_instructions() -> Optional[str]:
    """Get custom LLM instructions from global config.

    Returns:
        The instruction text, or None if not set or blank.
    """
    config = load_global_config()
    instructions = config.get("instructions")
    if not instructions or not str(instructions).strip():
        return None
    return str(instructions)


def set_instructions(instructions: str) -> None:
    """Set custom LLM instructions in global config.

    An empty string restores the default instructions.

    Args:
        instructions: The instruction text.
    """
    config = load_global_config()
    if instructions.strip():
        config["instructions"] = instructions
    else:
        config.pop("instructions", None)
    save_global_config(config)


def get_openrouter_referer_url() -> Optional[str]:
    """Get the HTTP referer URL sent to OpenRouter."""
    config = load_global_config()
    return config.get("openrouter_referer_url")


def initialize_default_config() -> None:
    """Initialize config.yaml with default values if it doesn't exist."""
    config_file = get_config_file_path()

    if config_file.exists():
        return

    ensure_global_config_dir()

    default_config = {
        "provider": DEFAULT_PROVIDER.value,
        "model": DEFAULT_MODEL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "temperature": DEFAULT_TEMPERATURE,
        "openrouter_referer_url": DEFAULT_OPENROUTER_REFERER_URL,
    }

    save_global_config(default_config)


def is_configured() -> bool:
    """Check if llmcommitter has been configured.

    Returns:
        True if config.yaml exists, False otherwise.
    """
    return get_config_file_path().exists()
