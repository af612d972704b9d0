"""Pydantic schemas for implementation plans produced by the LLM."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


PlanSource = Literal["parsed", "repaired", "fallback"]

_CREATE_ACTIONS = {"create", "add", "added", "new"}


class FileChange(BaseModel):
    """A file change to be made."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1, description="File path relative to repository root")
    action: Literal["create", "modify"] = Field(
        default="modify",
        description="Action: 'create' or 'modify'",
    )
    content: str = Field(description="Complete file content")
    explanation: str = Field(default="", description="Purpose of this file")

    @field_validator("path", mode="before")
    @classmethod
    def _strip_path(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("action", mode="before")
    @classmethod
    def _normalize_action(cls, value: object) -> str:
        if isinstance(value, str) and value.strip().lower() in _CREATE_ACTIONS:
            return "create"
        return "modify"

    @field_validator("explanation", mode="before")
    @classmethod
    def _default_explanation(cls, value: object) -> object:
        return "" if value is None else value


class ImplementationPlan(BaseModel):
    """Structured implementation plan recovered from a model reply."""

    model_config = ConfigDict(frozen=True)

    analysis: str = Field(default="", description="Summary of the implementation approach")
    files: list[FileChange] = Field(min_length=1, description="Ordered file changes")
    instructions: str | None = Field(default=None, description="Setup or deployment notes")

    _source: PlanSource = PrivateAttr(default="parsed")

    @field_validator("analysis", mode="before")
    @classmethod
    def _default_analysis(cls, value: object) -> object:
        return "" if value is None else value

    @property
    def source(self) -> PlanSource:
        """Which interpreter stage produced this plan."""
        return self._source

    def with_source(self, source: PlanSource) -> "ImplementationPlan":
        self._source = source
        return self
