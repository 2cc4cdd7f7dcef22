"""
LLM provider services.

One service per provider. Each builds the prompts, makes a single SDK call and hands
the reply text to the response parser. `GenerateReadme` dispatches to the service
that supports the configured provider.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import anthropic
import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import AzureOpenAI, OpenAI, OpenAIError

from .config import (
    ANTHROPIC_MAX_TOKENS,
    AZURE_OPENAI_API_VERSION,
    DEFAULT_AWS_REGION,
    DEFAULT_OLLAMA_URL,
    DEFAULT_TEMPERATURE,
    GOOGLE_MAX_TOKENS,
    OLLAMA_TIMEOUT_SECONDS,
    OPENAI_MAX_TOKENS,
    LLMProvider,
)
from .models import LLMConfiguration, PromptContext, Readme
from .parser import parse_response
from .prompts import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)

_REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")


class LLMError(Exception):
    """Error calling an LLM provider or interpreting its reply."""

    pass


def is_reasoning_model(model: str) -> bool:
    """Reasoning models reject a custom temperature."""
    return model.lower().startswith(_REASONING_MODEL_PREFIXES)


def split_azure_key(raw: str, base_url: str | None = None) -> tuple[str, str]:
    """Split an Azure credential into `(endpoint, key)`.

    The key may carry its endpoint as `https://name.openai.azure.com|key`; an explicit
    `base_url` takes precedence.

    Raises:
        LLMError: If no endpoint is available.
    """
    endpoint, sep, key = raw.partition("|")
    if not sep:
        endpoint, key = "", raw
    endpoint = (base_url or endpoint).strip()
    if not endpoint:
        raise LLMError(
            "Azure OpenAI needs an endpoint: pass --base-url, set AZURE_OPENAI_ENDPOINT "
            "or use 'https://<resource>.openai.azure.com|<key>' as the key"
        )
    return endpoint, key.strip()


def parse_bedrock_key(raw: str) -> tuple[str, str, str]:
    """Parse AWS Bedrock credentials into `(region, access_key_id, secret_access_key)`.

    Accepted forms: `region|access|secret`, `access|secret` (region defaults to
    us-east-1), or a JSON object with `region`, `accessKeyId` and `secretAccessKey`.

    Raises:
        LLMError: If the credential has none of these forms.
    """
    raw = raw.strip()
    if raw.startswith("{"):
        try:
            data = json.loads(raw)
            return (
                data.get("region") or DEFAULT_AWS_REGION,
                data["accessKeyId"],
                data["secretAccessKey"],
            )
        except (ValueError, KeyError) as e:
            raise LLMError(f"Invalid AWS Bedrock credentials JSON: {e}") from e

    parts = [p.strip() for p in raw.split("|")]
    if len(parts) == 3 and all(parts):
        return parts[0], parts[1], parts[2]
    if len(parts) == 2 and all(parts):
        return DEFAULT_AWS_REGION, parts[0], parts[1]
    raise LLMError("AWS Bedrock credentials must look like 'region|access-key-id|secret-access-key'")


def ollama_base_url(config: LLMConfiguration) -> str:
    if config.base_url:
        return config.base_url.rstrip("/")
    key = config.api_key.value
    if key.startswith(("http://", "https://")):
        return key.rstrip("/")
    return DEFAULT_OLLAMA_URL


class LLMService:
    """Base class for provider services."""

    provider: LLMProvider
    display_name: str = "LLM"
    errors: tuple[type[Exception], ...] = ()

    def supports(self, config: LLMConfiguration) -> bool:
        return config.provider == self.provider

    def complete(self, system_prompt: str, user_prompt: str, config: LLMConfiguration) -> str | None:
        """Send the prompts and return the raw reply text."""
        raise NotImplementedError

    def generate(self, context: PromptContext, config: LLMConfiguration) -> Readme:
        """Generate a README for `context` with one provider call.

        Raises:
            LLMError: If the provider call fails or returns no content.
            ResponseParseError: If the reply lacks required README fields.
        """
        system_prompt = build_system_prompt(context)
        user_prompt = build_user_prompt(context)
        logger.debug(
            "Calling %s model %s (prompt %d chars)",
            self.display_name,
            config.model,
            len(system_prompt) + len(user_prompt),
        )

        try:
            text = self.complete(system_prompt, user_prompt, config)
        except self.errors as e:
            raise LLMError(f"{self.display_name} request failed: {e}") from e

        if not text or not text.strip():
            raise LLMError(f"No content received from {self.display_name}")

        logger.debug("Received %d chars from %s", len(text), self.display_name)
        return parse_response(text, context)


class OpenAIService(LLMService):
    provider = LLMProvider.OPENAI
    display_name = "OpenAI"
    errors = (OpenAIError,)

    def _client(self, config: LLMConfiguration) -> Any:
        return OpenAI(api_key=config.api_key.value, base_url=config.base_url)

    def complete(self, system_prompt: str, user_prompt: str, config: LLMConfiguration) -> str | None:
        params: dict[str, Any] = {
            "model": config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {"type": "json_object"},
            "max_completion_tokens": OPENAI_MAX_TOKENS,
        }
        if not is_reasoning_model(config.model):
            params["temperature"] = DEFAULT_TEMPERATURE

        response = self._client(config).chat.completions.create(**params)
        if not response.choices:
            return None
        return response.choices[0].message.content


class AzureOpenAIService(OpenAIService):
    """Azure OpenAI: `model` is the deployment name, `base_url` the resource endpoint."""

    provider = LLMProvider.AZURE_OPENAI
    display_name = "Azure OpenAI"

    def _client(self, config: LLMConfiguration) -> Any:
        endpoint, key = split_azure_key(config.api_key.value, config.base_url)
        return AzureOpenAI(api_key=key, azure_endpoint=endpoint, api_version=AZURE_OPENAI_API_VERSION)


class AnthropicService(LLMService):
    provider = LLMProvider.ANTHROPIC
    display_name = "Anthropic"
    errors = (anthropic.AnthropicError,)

    def _client(self, config: LLMConfiguration) -> Any:
        return anthropic.Anthropic(api_key=config.api_key.value, base_url=config.base_url)

    def complete(self, system_prompt: str, user_prompt: str, config: LLMConfiguration) -> str | None:
        response = self._client(config).messages.create(
            model=config.model,
            max_tokens=ANTHROPIC_MAX_TOKENS,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=DEFAULT_TEMPERATURE,
        )
        return "".join(block.text for block in response.content if getattr(block, "type", None) == "text")


class AWSBedrockService(AnthropicService):
    """Anthropic models hosted on AWS Bedrock."""

    provider = LLMProvider.AWS_BEDROCK
    display_name = "AWS Bedrock"

    def _client(self, config: LLMConfiguration) -> Any:
        region, access_key, secret_key = parse_bedrock_key(config.api_key.value)
        return anthropic.AnthropicBedrock(
            aws_access_key=access_key,
            aws_secret_key=secret_key,
            aws_region=region,
        )


class GoogleService(LLMService):
    provider = LLMProvider.GOOGLE
    display_name = "Google Gemini"
    errors = (genai_errors.APIError, ValueError)

    def _client(self, config: LLMConfiguration) -> Any:
        return genai.Client(api_key=config.api_key.value)

    def complete(self, system_prompt: str, user_prompt: str, config: LLMConfiguration) -> str | None:
        response = self._client(config).models.generate_content(
            model=config.model,
            contents=user_prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
                temperature=DEFAULT_TEMPERATURE,
                max_output_tokens=GOOGLE_MAX_TOKENS,
            ),
        )
        return response.text


class OllamaService(LLMService):
    provider = LLMProvider.OLLAMA
    display_name = "Ollama"
    errors = (requests.RequestException, ValueError, KeyError)

    def complete(self, system_prompt: str, user_prompt: str, config: LLMConfiguration) -> str | None:
        response = requests.post(
            f"{ollama_base_url(config)}/api/chat",
            json={
                "model": config.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "stream": False,
                "format": "json",
                "options": {"temperature": DEFAULT_TEMPERATURE},
            },
            timeout=OLLAMA_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()["message"]["content"]


def default_services() -> list[LLMService]:
    return [
        OpenAIService(),
        AnthropicService(),
        GoogleService(),
        AzureOpenAIService(),
        AWSBedrockService(),
        OllamaService(),
    ]


class GenerateReadme:
    """Generate a README with whichever registered service supports the configuration."""

    def __init__(self, services: list[LLMService] | None = None) -> None:
        self.services = services if services is not None else default_services()

    def execute(self, context: PromptContext, config: LLMConfiguration) -> Readme:
        """Run generation.

        Args:
            context: Repository context for the prompts.
            config: Provider, model and credentials.

        Returns:
            The parsed and rendered README.

        Raises:
            LLMError: If no service supports the provider or the call fails.
            ResponseParseError: If the reply lacks required README fields.
        """
        for service in self.services:
            if service.supports(config):
                return service.generate(context, config)
        raise LLMError(f"No LLM service available for provider: {config.provider.value}")
