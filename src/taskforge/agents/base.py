"""Base agent class."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

from taskforge.config import Settings
from taskforge.github.client import GitHubClient
from taskforge.llm.provider import LLMProvider


@dataclass
class AgentContext:
    """Context passed to agents for processing."""

    github_client: GitHubClient
    settings: Settings
    llm_provider: LLMProvider | None = None
    workspace_path: Path | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def workspace(self) -> Path:
        return (self.workspace_path or self.settings.workspace).resolve()


class BaseAgent(ABC):
    """Base class for all agents."""

    def __init__(self, context: AgentContext):
        """Initialize the agent.

        Args:
            context: Agent context with clients and configuration
        """
        self.context = context
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def github(self) -> GitHubClient:
        """Get the GitHub client."""
        return self.context.github_client

    @property
    def settings(self) -> Settings:
        return self.context.settings

    @abstractmethod
    async def run(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the agent's main task."""

    def _log_info(self, message: str) -> None:
        self.logger.info(message)

    def _log_error(self, message: str) -> None:
        self.logger.error(message)

    def _log_warning(self, message: str) -> None:
        self.logger.warning(message)
