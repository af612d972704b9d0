"""LLM abstraction layer for taskforge using LangChain."""

from taskforge.llm.provider import LLMProvider, LLMResponse
from taskforge.llm.factory import get_provider, provider_from_settings, LLMConfigError
from taskforge.llm.schemas import FileChange, ImplementationPlan

__all__ = [
    # Provider
    "LLMProvider",
    "LLMResponse",
    # Factory
    "get_provider",
    "provider_from_settings",
    "LLMConfigError",
    # Schemas
    "FileChange",
    "ImplementationPlan",
]
