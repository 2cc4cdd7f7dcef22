"""
Interactive prompting and LLM configuration.

Every value is resolved in the same order: command-line flag, then saved config (or
environment variable for credentials), then an interactive prompt. With prompts
disabled, a missing required value is an error instead.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Sequence, TypeVar

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from .config import (
    API_KEY_ENV_VARS,
    BASE_URL_ENV_VARS,
    DEFAULT_LANGUAGE,
    DEFAULT_OLLAMA_URL,
    DEFAULT_SCAN_DEPTH,
    LANGUAGE_CHOICES,
    MODEL_CHOICES,
    SCAN_DEPTH_LABELS,
    LLMProvider,
    ScanDepth,
)
from .config_loader import ConfigError, SavedConfig
from .models import ApiKey, LLMConfiguration

console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")

OLLAMA_PLACEHOLDER_KEY = "ollama-local"
CUSTOM_MODEL_LABEL = "Other (enter model name)"

PROVIDER_LABELS: dict[LLMProvider, str] = {
    LLMProvider.OPENAI: "OpenAI",
    LLMProvider.ANTHROPIC: "Anthropic",
    LLMProvider.GOOGLE: "Google Gemini",
    LLMProvider.AZURE_OPENAI: "Azure OpenAI",
    LLMProvider.AWS_BEDROCK: "AWS Bedrock",
    LLMProvider.OLLAMA: "Ollama (local)",
}

API_KEY_HINTS: dict[LLMProvider, str] = {
    LLMProvider.AZURE_OPENAI: "the key alone, or https://<resource>.openai.azure.com|<key>",
    LLMProvider.AWS_BEDROCK: "format: region|access-key-id|secret-access-key",
}


def _cancelled() -> typer.Exit:
    console.print("\n[yellow]Operation cancelled.[/yellow]")
    return typer.Exit(1)


def select(message: str, options: Sequence[tuple[T, str]], default: T | None = None) -> T:
    """Show a numbered menu and return the chosen option's value.

    Args:
        message: Question shown above the menu.
        options: `(value, label)` pairs.
        default: Value preselected when the user just presses Enter.

    Returns:
        The selected value.

    Raises:
        typer.Exit: If the user presses Ctrl+C.
    """
    console.print(f"[bold]{message}[/bold]")
    default_index = 1
    for index, (value, label) in enumerate(options, start=1):
        console.print(f"  {index}. {label}")
        if value == default:
            default_index = index

    try:
        answer = Prompt.ask(
            "Choose",
            choices=[str(i) for i in range(1, len(options) + 1)],
            default=str(default_index),
            console=console,
            show_choices=False,
        )
    except (KeyboardInterrupt, EOFError):
        raise _cancelled() from None
    return options[int(answer) - 1][0]


def text(message: str, default: str = "", password: bool = False) -> str:
    """Ask for free text. Ctrl+C exits."""
    try:
        return Prompt.ask(message, default=default, password=password, console=console, show_default=bool(default))
    except (KeyboardInterrupt, EOFError):
        raise _cancelled() from None


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question. Ctrl+C exits."""
    try:
        return Confirm.ask(message, default=default, console=console)
    except (KeyboardInterrupt, EOFError):
        raise _cancelled() from None


def _resolve_provider(
    provider: LLMProvider | None, saved: SavedConfig, interactive: bool
) -> LLMProvider:
    if provider is not None:
        return provider
    if saved.provider is not None:
        console.print(f"📌 Using saved provider: {PROVIDER_LABELS[saved.provider]}")
        return saved.provider
    if not interactive:
        raise ConfigError("No LLM provider given. Pass --provider or save one in the config file.")
    return select("Select LLM provider:", [(p, PROVIDER_LABELS[p]) for p in LLMProvider], LLMProvider.OPENAI)


def _resolve_model(
    provider: LLMProvider, model: str | None, saved: SavedConfig, interactive: bool
) -> str:
    if model:
        return model
    if saved.model and saved.provider == provider:
        console.print(f"📌 Using saved model: {saved.model}")
        return saved.model

    choices = MODEL_CHOICES[provider]
    if not interactive:
        return choices[0]

    options: list[tuple[str, str]] = [(m, m) for m in choices]
    options.append(("", CUSTOM_MODEL_LABEL))
    chosen = select(f"Select {PROVIDER_LABELS[provider]} model:", options, choices[0])
    while not chosen:
        chosen = text("Model name").strip()
    return chosen


def _resolve_api_key(provider: LLMProvider, api_key: str | None, interactive: bool) -> ApiKey:
    if api_key and api_key.strip():
        return ApiKey(api_key)

    env_var = API_KEY_ENV_VARS[provider]
    from_env = os.environ.get(env_var, "")
    if from_env.strip():
        logger.debug("Using API key from %s", env_var)
        return ApiKey(from_env)

    if provider is LLMProvider.OLLAMA:
        return ApiKey(OLLAMA_PLACEHOLDER_KEY)

    if not interactive:
        raise ConfigError(f"No API key for {PROVIDER_LABELS[provider]}. Pass --key or set {env_var}.")

    hint = API_KEY_HINTS.get(provider)
    label = f"Enter {PROVIDER_LABELS[provider]} API key" + (f" ({hint})" if hint else "")
    while True:
        entered = text(label, password=True).strip()
        if entered:
            return ApiKey(entered)
        console.print("[red]API key must not be empty.[/red]")


def _has_embedded_endpoint(provider: LLMProvider, key: ApiKey) -> bool:
    if provider is LLMProvider.AZURE_OPENAI:
        endpoint, sep, _ = key.value.partition("|")
        return bool(sep and endpoint.strip())
    if provider is LLMProvider.OLLAMA:
        return key.value.startswith(("http://", "https://"))
    return False


def _resolve_base_url(
    provider: LLMProvider, base_url: str | None, key: ApiKey, saved: SavedConfig, interactive: bool
) -> str | None:
    if base_url and base_url.strip():
        return base_url.strip()
    if saved.base_url and saved.provider == provider:
        console.print(f"📌 Using saved endpoint: {saved.base_url}")
        return saved.base_url

    env_var = BASE_URL_ENV_VARS.get(provider)
    if env_var is None:
        return None
    from_env = os.environ.get(env_var, "").strip()
    if from_env:
        logger.debug("Using endpoint from %s", env_var)
        return from_env
    if _has_embedded_endpoint(provider, key):
        return None

    if provider is LLMProvider.OLLAMA:
        if not interactive:
            return None
        return text("Ollama server URL", default=DEFAULT_OLLAMA_URL).strip() or DEFAULT_OLLAMA_URL

    if not interactive:
        raise ConfigError(f"No {PROVIDER_LABELS[provider]} endpoint. Pass --base-url or set {env_var}.")
    while True:
        entered = text(f"Enter {PROVIDER_LABELS[provider]} endpoint (https://<resource>.openai.azure.com)").strip()
        if entered:
            return entered
        console.print("[red]Endpoint must not be empty.[/red]")


def configure_llm(
    provider: LLMProvider | None,
    model: str | None,
    api_key: str | None,
    saved: SavedConfig,
    interactive: bool = True,
    base_url: str | None = None,
) -> LLMConfiguration:
    """Resolve provider, model, credentials and endpoint for this run.

    Azure OpenAI needs an endpoint and Ollama may use one. Either can travel inside
    the credential (`endpoint|key` for Azure, a server URL for Ollama); otherwise it
    comes from `base_url`, the saved config, the provider's endpoint variable or a
    prompt.

    Args:
        provider: Provider from the command line, if any.
        model: Model from the command line, if any.
        api_key: API key from the command line, if any.
        saved: Settings from the config file.
        interactive: Whether prompting is allowed.
        base_url: Endpoint from the command line, if any.

    Returns:
        The LLM configuration.

    Raises:
        ConfigError: If prompting is disabled and the provider, API key or Azure
            endpoint is missing.
        typer.Exit: If the user cancels a prompt.
    """
    resolved_provider = _resolve_provider(provider, saved, interactive)
    resolved_model = _resolve_model(resolved_provider, model, saved, interactive)
    key = _resolve_api_key(resolved_provider, api_key, interactive)
    resolved_base_url = _resolve_base_url(resolved_provider, base_url, key, saved, interactive)

    logger.debug(
        "Using %s / %s with key %s (endpoint %s)",
        resolved_provider.value,
        resolved_model,
        key.redacted(),
        resolved_base_url or "default",
    )
    return LLMConfiguration(
        provider=resolved_provider, model=resolved_model, api_key=key, base_url=resolved_base_url
    )


def prompt_missing_options(merged: dict[str, Any], github_repo: bool) -> dict[str, Any]:
    """Prompt for generation options that are neither on the CLI nor saved.

    Args:
        merged: Output of `merge_cli_with_config`.
        github_repo: Whether GitHub-only options (stat badges) apply.

    Returns:
        A copy of `merged` with every option filled in.
    """
    result = dict(merged)

    if result.get("language") is None:
        result["language"] = select(
            "Select README language:",
            [(code, name) for code, name in LANGUAGE_CHOICES.items()],
            DEFAULT_LANGUAGE,
        )
    else:
        console.print(f"📌 Using language: {result['language']}")

    if result.get("scan_depth") is None:
        result["scan_depth"] = select(
            "Select scan depth for project files:",
            [(depth, SCAN_DEPTH_LABELS[depth]) for depth in SCAN_DEPTH_LABELS],
            DEFAULT_SCAN_DEPTH,
        )
    else:
        console.print(f"📌 Using scan depth: {SCAN_DEPTH_LABELS[ScanDepth(result['scan_depth'])]}")

    if result.get("context") is None:
        result["context"] = text("Additional context for the README (optional)", default="")

    if result.get("logo_url") is None:
        result["logo_url"] = text("Logo image URL (leave empty for the default logo)", default="").strip() or None

    if result.get("github_badges") is None:
        result["github_badges"] = confirm("Include GitHub stats badges?", default=True) if github_repo else False

    if result.get("contributors") is None:
        result["contributors"] = confirm("Include a contributors section?", default=False)

    return result
