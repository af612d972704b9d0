"""Skip issues the agent has already picked up."""

import logging
from collections.abc import Iterable

from taskforge.github.models import CommentData


logger = logging.getLogger(__name__)


def find_assignment_comment(
    comments: Iterable[CommentData],
    *,
    bot_login: str = "github-actions[bot]",
    marker: str = "🤖 **AI Agent Assigned**",
) -> CommentData | None:
    """Return the first assignment comment posted by the bot, if any."""
    for comment in comments:
        if comment.author == bot_login and marker in comment.body:
            return comment
    return None


def check_duplicate(
    comments: Iterable[CommentData],
    *,
    bot_login: str = "github-actions[bot]",
    marker: str = "🤖 **AI Agent Assigned**",
) -> bool:
    """Check the comment history for a previous assignment.

    Returns:
        True when processing should continue
    """
    existing = find_assignment_comment(comments, bot_login=bot_login, marker=marker)
    if existing is not None:
        logger.info("Assignment comment already present, skipping duplicate")
        return False
    return True
