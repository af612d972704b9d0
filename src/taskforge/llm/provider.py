"""LLM provider abstraction using LangChain."""

from dataclasses import dataclass, field
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    raw_response: Any = None


class LLMProvider:
    """LLM provider wrapper using LangChain.

    Replies are returned as plain text. The provider never enforces a
    schema; turning the text into a plan is the interpreter's job.
    """

    def __init__(
        self,
        model: BaseChatModel,
        model_name: str = "unknown",
    ):
        """Initialize the provider.

        Args:
            model: LangChain chat model instance
            model_name: Name of the model for logging
        """
        self.model = model
        self.model_name = model_name

    async def generate(
        self,
        prompt: str,
        stop: list[str] | None = None,
    ) -> LLMResponse:
        """Send a prompt as a single user message and return the text reply.

        Args:
            prompt: The complete instruction document
            stop: Stop sequences

        Returns:
            LLMResponse with the generated content
        """
        kwargs: dict[str, Any] = {}
        if stop:
            kwargs["stop"] = stop

        response = await self.model.ainvoke([HumanMessage(content=prompt)], **kwargs)

        usage = {}
        if hasattr(response, "usage_metadata") and response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.get("input_tokens", 0),
                "completion_tokens": response.usage_metadata.get("output_tokens", 0),
                "total_tokens": response.usage_metadata.get("total_tokens", 0),
            }

        return LLMResponse(
            content=_content_text(response.content),
            model=self.model_name,
            usage=usage,
            raw_response=response,
        )


def _content_text(content: Any) -> str:
    # Anthropic models may return a list of content blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, dict):
                parts.append(str(block.get("text", "")))
            else:
                parts.append(str(block))
        return "".join(parts)
    return str(content)
