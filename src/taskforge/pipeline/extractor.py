"""Extract a structured task from a loosely templated issue."""

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from taskforge.github.models import IssueData
from taskforge.pipeline.models import TaskDescriptor


logger = logging.getLogger(__name__)

DEFAULT_TASK_TYPE = "Development"
DEFAULT_PRIORITY = "Medium"

# Placeholder GitHub issue forms write for skipped fields
NO_RESPONSE = "_No response_"


class TaskExtractionError(Exception):
    """Raised when an issue yields neither a title nor a description."""


@dataclass(frozen=True)
class Strategy:
    """A named extraction strategy: text in, value or None out."""

    name: str
    extract: Callable[[str], str | None]


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value or value == NO_RESPONSE or value.startswith("#"):
        return None
    return value


def _pattern(name: str, regex: str, flags: int = re.IGNORECASE) -> Strategy:
    compiled = re.compile(regex, flags)

    def extract(text: str) -> str | None:
        match = compiled.search(text)
        return _clean(match.group(1)) if match else None

    return Strategy(name, extract)


def _section(*headings: str) -> str:
    names = "|".join(re.escape(h) for h in headings)
    return rf"^###\s*(?:{names})[ \t]*\n([\s\S]+?)(?=\n###|\Z)"


def _section_line(*headings: str) -> str:
    names = "|".join(re.escape(h) for h in headings)
    return rf"^###\s*(?:{names})[ \t]*\n\s*([^\n]+)"


_MULTILINE = re.IGNORECASE | re.MULTILINE

DESCRIPTION_STRATEGIES: Sequence[Strategy] = (
    _pattern("section", _section("Task Description", "Description"), _MULTILINE),
    _pattern("inline", r"(?:Description|Summary):\s*([\s\S]+?)(?:\n\n|\n###|\Z)"),
    _pattern("leading_text", r"\A(?!\s*###)([\s\S]+?)(?:\n###|\n\n##|\Z)"),
)

TASK_TYPE_STRATEGIES: Sequence[Strategy] = (
    _pattern("section", _section_line("Task Type"), _MULTILINE),
    _pattern("inline", r"^\s*(?:Task Type|Type)\s*:\s*(.+)", _MULTILINE),
)

PRIORITY_STRATEGIES: Sequence[Strategy] = (
    _pattern("section", _section_line("Priority"), _MULTILINE),
    _pattern("inline", r"^\s*Priority\s*:\s*(.+)", _MULTILINE),
)

REQUIREMENTS_STRATEGIES: Sequence[Strategy] = (
    _pattern("section", _section("Requirements", "Acceptance Criteria"), _MULTILINE),
    _pattern("inline", r"(?:Requirements|Criteria):\s*([\s\S]+?)(?:\n\n|\n###|\Z)"),
)


def first_match(strategies: Sequence[Strategy], text: str) -> str | None:
    """Run strategies in order and return the first non-empty value."""
    for strategy in strategies:
        value = strategy.extract(text)
        if value:
            logger.debug(f"Matched with strategy '{strategy.name}'")
            return value
    return None


def normalize_priority(value: str) -> str:
    """Map free-text priority onto High / Low or a capitalized variant."""
    lowered = value.strip().lower()
    if "high" in lowered or "urgent" in lowered:
        return "High"
    if "low" in lowered:
        return "Low"
    return lowered[:1].upper() + lowered[1:]


def parse_task_fields(title: str, body: str) -> dict[str, str | None]:
    """Extract description, task type, priority and requirements.

    Args:
        title: Issue title, used when no description is found
        body: Issue body in Markdown

    Returns:
        Dict with ``description``, ``task_type``, ``priority`` and
        ``requirements`` keys
    """
    title = (title or "").strip()
    body = (body or "").replace("\r\n", "\n")

    priority = first_match(PRIORITY_STRATEGIES, body)
    return {
        "description": first_match(DESCRIPTION_STRATEGIES, body) or title,
        "task_type": first_match(TASK_TYPE_STRATEGIES, body) or DEFAULT_TASK_TYPE,
        "priority": normalize_priority(priority) if priority else DEFAULT_PRIORITY,
        "requirements": first_match(REQUIREMENTS_STRATEGIES, body),
    }


def extract_task(issue: IssueData) -> TaskDescriptor:
    """Build the task descriptor for an issue.

    Raises:
        TaskExtractionError: If both title and description are empty
    """
    fields = parse_task_fields(issue.title, issue.body)
    title = (issue.title or "").strip()

    if not title and not fields["description"]:
        raise TaskExtractionError(
            f"Missing required task information (title or description) in issue #{issue.number}"
        )

    task = TaskDescriptor(
        issue_number=issue.number,
        title=title,
        description=fields["description"],
        task_type=fields["task_type"],
        priority=fields["priority"],
        requirements=fields["requirements"],
        author=issue.author,
        labels=tuple(issue.labels),
        created_at=issue.created_at,
    )
    logger.info(
        f"Parsed issue #{issue.number}: type={task.task_type}, priority={task.priority}"
    )
    return task
