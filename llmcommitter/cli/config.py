"""CLI commands for global configuration management."""

from typing import Optional

import typer

from llmcommitter import global_config
from llmcommitter.cli.utils import run_async
from llmcommitter.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_MODELS,
    DEFAULT_INSTRUCTIONS,
    DEFAULT_MODELS,
    LLMProvider,
    load_settings,
)
from llmcommitter.llm import get_provider
from llmcommitter.llm.base import CompletionSettings

VALID_PROVIDERS = ", ".join(provider.value for provider in LLMProvider)

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global llmcommitter configuration in ~/.llmcommitter/",
    add_completion=False,
)


def _parse_provider(provider: str) -> LLMProvider:
    try:
        return LLMProvider(provider.lower())
    except ValueError:
        typer.echo(f"Invalid provider: {provider}", err=True)
        typer.echo(f"Valid providers: {VALID_PROVIDERS}")
        raise typer.Exit(1)


def _mask(api_key: str) -> str:
    return api_key[:8] + "..." + api_key[-4:] if len(api_key) > 12 else "***"


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration."""
    try:
        settings = load_settings()
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)

    if not global_config.is_configured():
        typer.echo("No configuration file found; using defaults.")
        typer.echo("")

    typer.echo(f"Current llmcommitter configuration ({global_config.get_config_file_path()}):")
    typer.echo("")
    typer.echo(f"  Provider: {settings.provider.value}")
    typer.echo(f"  Model: {settings.model}")
    typer.echo(f"  Max Tokens: {settings.max_tokens}")
    typer.echo(f"  Temperature: {settings.temperature}")
    custom = settings.instructions != DEFAULT_INSTRUCTIONS
    typer.echo(
        f"  Instructions: {'custom' if custom else 'default'} ({len(settings.instructions)} chars)"
    )
    if settings.provider == LLMProvider.OPENROUTER:
        typer.echo(f"  OpenRouter Referer: {settings.openrouter_referer_url}")

    env_var = API_KEY_ENV_VARS[settings.provider]
    if settings.has_api_key:
        typer.echo(f"  API Key ({env_var}): {_mask(settings.api_key)}")
    else:
        typer.echo(f"  API Key ({env_var}): not set")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help=f"Provider name ({VALID_PROVIDERS})"),
) -> None:
    """Set or update an API key for a provider."""
    llm_provider = _parse_provider(provider)
    env_var = API_KEY_ENV_VARS[llm_provider]

    typer.echo(f"Setting API key for {llm_provider.value}")
    api_key = typer.prompt(f"Enter your {llm_provider.value} API key", hide_input=True)

    try:
        global_config.save_credential(env_var, api_key.strip())
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ API key saved for {llm_provider.value}")


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help=f"Provider name ({VALID_PROVIDERS})"),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (defaults to the provider's default model)",
    ),
) -> None:
    """Set the active LLM provider and model."""
    llm_provider = _parse_provider(provider)

    model = model or DEFAULT_MODELS[llm_provider]
    if model not in AVAILABLE_MODELS[llm_provider]:
        typer.echo(f"Warning: {model} is not in the list of known models for {llm_provider.value}")
        if not typer.confirm("Continue anyway?", default=False):
            raise typer.Exit(0)

    try:
        global_config.set_provider_and_model(llm_provider, model)
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Provider set to: {llm_provider.value}")
    typer.echo(f"✓ Model set to: {model}")


@config_app.command("set-instructions")
def config_set_instructions(
    text: Optional[str] = typer.Argument(None, help="Instruction template sent with every prompt"),
    reset: bool = typer.Option(False, "--reset", help="Go back to the default instructions"),
) -> None:
    """Set the instruction template used in every prompt."""
    if reset:
        text = ""
    elif text is None:
        typer.echo("Provide the instructions, or --reset.", err=True)
        raise typer.Exit(1)

    try:
        global_config.set_instructions(text)
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("✓ Instructions reset to default" if not text.strip() else "✓ Instructions saved")


@config_app.command("list-models")
def config_list_models(
    provider: Optional[str] = typer.Argument(
        None,
        help="Provider name (optional, shows all if not provided)",
    ),
) -> None:
    """List available models for a provider (or all providers)."""
    providers = [_parse_provider(provider)] if provider else list(LLMProvider)
    for llm_provider in providers:
        typer.echo(f"{llm_provider.value}:")
        for model in AVAILABLE_MODELS[llm_provider]:
            typer.echo(f"  • {model}")
        typer.echo("")


@config_app.command("test")
def config_test() -> None:
    """Send a minimal request to check the API key and model."""
    settings = load_settings()
    provider = get_provider(settings.provider, settings.openrouter_referer_url)

    typer.echo(f"Testing {settings.provider.value} with model {settings.model}...")
    result = run_async(
        provider.test_connection(CompletionSettings.from_llm_settings(settings, settings.max_tokens))
    )
    if result.success:
        typer.echo("✓ Connection successful")
        return

    typer.echo(f"✗ Connection failed ({result.error_kind.value}): {result.error}", err=True)
    raise typer.Exit(1)


@config_app.command("init")
def config_init() -> None:
    """Write ~/.llmcommitter/config.yaml with default values if it does not exist."""
    if global_config.is_configured():
        typer.echo(f"Configuration already exists at {global_config.get_config_file_path()}")
        return
    try:
        global_config.initialize_default_config()
    except (OSError, global_config.GlobalConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Created {global_config.get_config_file_path()}")
    typer.echo("Run 'llmcommitter config set-key <provider>' to add an API key.")
