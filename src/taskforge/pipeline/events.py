"""Inbound GitHub event payload parsing."""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from taskforge.github.models import IssueData, CommentData


class MissingIssueError(Exception):
    """Raised when a stage requires an issue and the event carries none."""


@dataclass
class IssueEvent:
    """The parts of an issues / issue_comment event the pipeline reads."""

    action: str
    issue: IssueData | None = None
    comment: CommentData | None = None
    repository: str = ""
    sender: str = ""

    def require_issue(self) -> IssueData:
        if self.issue is None:
            raise MissingIssueError("No issue found in event payload")
        return self.issue


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp into an aware datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_issue(data: dict) -> IssueData:
    return IssueData(
        number=data.get("number", 0),
        title=data.get("title") or "",
        body=data.get("body") or "",
        labels=[label.get("name", "") for label in data.get("labels") or []],
        author=(data.get("user") or {}).get("login", ""),
        state=data.get("state", "open"),
        url=data.get("html_url", ""),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
    )


def parse_event(payload: dict) -> IssueEvent:
    """Parse a raw event payload.

    Args:
        payload: Decoded webhook body or Actions event file

    Returns:
        IssueEvent; ``issue`` and ``comment`` are None when absent
    """
    issue_data = payload.get("issue")
    comment_data = payload.get("comment")

    comment = None
    if comment_data:
        comment = CommentData(
            author=(comment_data.get("user") or {}).get("login", ""),
            body=comment_data.get("body") or "",
            id=comment_data.get("id"),
            created_at=parse_timestamp(comment_data.get("created_at")),
        )

    return IssueEvent(
        action=payload.get("action", ""),
        issue=_parse_issue(issue_data) if issue_data else None,
        comment=comment,
        repository=(payload.get("repository") or {}).get("full_name", ""),
        sender=(payload.get("sender") or {}).get("login", ""),
    )


def load_event(path: Path | str) -> IssueEvent:
    """Load and parse an event file such as ``$GITHUB_EVENT_PATH``."""
    with open(path, encoding="utf-8") as fh:
        return parse_event(json.load(fh))
