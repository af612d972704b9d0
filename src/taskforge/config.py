"""Configuration for the task automation pipeline."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigurationError(Exception):
    """Raised when a required setting or credential is missing."""


class Settings(BaseSettings):
    """Pipeline and server configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # GitHub settings
    github_token: str = ""
    github_repository: str = ""
    github_webhook_secret: str = ""

    # LLM settings
    llm_provider: str = "claude"
    llm_model: str | None = None
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    # Trigger vocabulary
    trigger_label: str = "ai-agent"
    trigger_mention: str = "@ai-agent"
    trigger_title_prefix: str = "[AI]"
    label_guard_seconds: int = 30

    # Duplicate detection
    bot_login: str = "github-actions[bot]"
    assigned_marker: str = "🤖 **AI Agent Assigned**"

    # Labels
    working_labels: list[str] = Field(default_factory=lambda: ["in-progress", "ai-working"])
    failed_label: str = "ai-failed"
    pr_labels: list[str] = Field(default_factory=lambda: ["ai-generated"])

    # Workspace and prompt context
    workspace_path: str = "."
    structure_max_depth: int = 3
    structure_max_files: int = 100
    platform_framework: str = "Next.js 15 with App Router"
    platform_language: str = "TypeScript"
    platform_styling: str = "Tailwind CSS"

    # PR evaluation
    auto_merge: bool = True

    # Logging
    log_level: str = "INFO"
    log_dir: str = ".ai-logs"

    @property
    def workspace(self) -> Path:
        """Working tree the pipeline reads from and writes to."""
        return Path(self.workspace_path).resolve()

    def require_github_token(self) -> str:
        """Get the GitHub token or fail."""
        if not self.github_token:
            raise ConfigurationError(
                "GitHub token not configured. Set GITHUB_TOKEN environment variable."
            )
        return self.github_token


def configure_logging(level: str = "INFO") -> None:
    """Configure standard library logging for the server and CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
