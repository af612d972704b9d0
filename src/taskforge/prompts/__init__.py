"""Prompt templates and few-shot examples for the task pipeline."""

from taskforge.prompts.few_shots import (
    IMPLEMENTATION_EXAMPLES,
    format_implementation_examples,
)
from taskforge.prompts.templates import (
    IMPLEMENTATION_PROMPT,
    START_COMMENT,
    FAILURE_COMMENT,
    COMPLETION_COMMENT,
    PR_BODY,
    IMPLEMENTATION_SUMMARY,
    APPROVE_REVIEW,
    REQUEST_CHANGES_REVIEW,
)

__all__ = [
    "IMPLEMENTATION_EXAMPLES",
    "format_implementation_examples",
    "IMPLEMENTATION_PROMPT",
    "START_COMMENT",
    "FAILURE_COMMENT",
    "COMPLETION_COMMENT",
    "PR_BODY",
    "IMPLEMENTATION_SUMMARY",
    "APPROVE_REVIEW",
    "REQUEST_CHANGES_REVIEW",
]
