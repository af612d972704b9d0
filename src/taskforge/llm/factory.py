"""Build the chat model that writes implementation plans."""

import logging
import os
from dataclasses import dataclass
from typing import Literal

from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from taskforge.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

ProviderType = Literal["claude", "openai"]

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o"

# Plans embed whole files, so Claude gets room for long replies
CLAUDE_MAX_TOKENS = 8192


class LLMConfigError(Exception):
    """Raised when LLM configuration is invalid."""


@dataclass(frozen=True)
class _Backend:
    key_env: str
    model_env: str
    default_model: str
    label: str


_BACKENDS: dict[str, _Backend] = {
    "claude": _Backend("ANTHROPIC_API_KEY", "ANTHROPIC_MODEL", DEFAULT_CLAUDE_MODEL, "Anthropic"),
    "openai": _Backend("OPENAI_API_KEY", "OPENAI_MODEL", DEFAULT_OPENAI_MODEL, "OpenAI"),
}


def get_provider(
    provider_name: ProviderType | None = None,
    api_key: str | None = None,
    model: str | None = None,
    api_url: str | None = None,
    temperature: float = 0.2,
    max_tokens: int | None = None,
) -> LLMProvider:
    """Create an LLMProvider for Claude or OpenAI.

    Unset arguments fall back to the environment: ``LLM_PROVIDER``,
    ``LLM_API_URL`` and the provider's own key and model variables.

    Raises:
        LLMConfigError: If the provider is unknown or has no API key
    """
    provider_name = provider_name or os.getenv("LLM_PROVIDER", "claude")  # type: ignore[assignment]
    backend = _BACKENDS.get(provider_name)
    if backend is None:
        raise LLMConfigError(
            f"Unknown provider: {provider_name}. Supported: {', '.join(map(repr, _BACKENDS))}"
        )

    api_key = api_key or os.getenv(backend.key_env)
    if not api_key:
        raise LLMConfigError(
            f"{backend.label} API key not found. Set {backend.key_env} environment variable."
        )
    model = model or os.getenv(backend.model_env, backend.default_model)
    api_url = api_url or os.getenv("LLM_API_URL")

    kwargs: dict = {"api_key": api_key, "model": model, "temperature": temperature}
    if api_url:
        kwargs["base_url"] = api_url

    if provider_name == "claude":
        kwargs["max_tokens"] = max_tokens or CLAUDE_MAX_TOKENS
        chat_model = ChatAnthropic(**kwargs)
    else:
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        chat_model = ChatOpenAI(**kwargs)

    logger.debug(f"Using {backend.label} model {model}")
    return LLMProvider(model=chat_model, model_name=model)


def provider_from_settings(settings) -> LLMProvider:
    """Build the provider described by a Settings instance."""
    key = settings.openai_api_key if settings.llm_provider == "openai" else settings.anthropic_api_key
    return get_provider(
        provider_name=settings.llm_provider,
        api_key=key or None,
        model=settings.llm_model,
    )
