"""Decide whether an inbound event should start the pipeline."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from taskforge.pipeline.events import IssueEvent


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerResult:
    """Outcome of trigger validation."""

    should_process: bool
    reason: str


def validate_trigger(
    event: IssueEvent,
    *,
    trigger_label: str = "ai-agent",
    mention: str = "@ai-agent",
    title_prefix: str = "[AI]",
    guard_seconds: int = 30,
    now: datetime | None = None,
) -> TriggerResult:
    """Check an event against the trigger label, mention and title prefix.

    A ``labeled`` event for an issue created less than ``guard_seconds``
    ago is never processed, whatever else matches. This keeps the agent
    from reacting to labels applied automatically at issue creation.

    Args:
        event: Parsed event payload
        trigger_label: Label that requests processing
        mention: Token that requests processing from a comment body
        title_prefix: Issue title prefix that requests processing
        guard_seconds: Minimum issue age for ``labeled`` events
        now: Current time, defaults to ``datetime.now(timezone.utc)``

    Returns:
        TriggerResult with the decision and a short reason
    """
    issue = event.issue
    if issue is None:
        logger.info("No issue found in event payload")
        return TriggerResult(False, "no issue in event")

    has_label = any(label == trigger_label for label in issue.labels)
    has_mention = bool(event.comment and mention in event.comment.body)
    has_prefix = bool(title_prefix) and issue.title.startswith(title_prefix)

    if event.action == "labeled" and issue.created_at is not None:
        now = now or datetime.now(timezone.utc)
        age = (now - issue.created_at).total_seconds()
        if age < guard_seconds:
            logger.info(
                f"Issue #{issue.number}: labeled {age:.0f}s after creation, skipping"
            )
            return TriggerResult(False, f"issue created {age:.0f}s ago")

    if has_label:
        reason = f"label '{trigger_label}'"
    elif has_mention:
        reason = f"mention '{mention}'"
    elif has_prefix:
        reason = f"title prefix '{title_prefix}'"
    else:
        reason = "no trigger found"

    should_process = has_label or has_mention or has_prefix
    logger.info(
        f"Issue #{issue.number}: trigger {'detected' if should_process else 'not found'}"
    )
    return TriggerResult(should_process, reason)
