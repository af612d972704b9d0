"""Status comments and labels on the issue being processed."""

import logging
from dataclasses import dataclass, field

from taskforge.github.client import GitHubClient, GitHubClientError
from taskforge.github.models import PRData
from taskforge.pipeline.models import TaskDescriptor
from taskforge.prompts import START_COMMENT, FAILURE_COMMENT, COMPLETION_COMMENT


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationConfig:
    """Labels and tokens used in status notifications."""

    marker: str = "🤖 **AI Agent Assigned**"
    working_labels: tuple[str, ...] = ("in-progress", "ai-working")
    active_label: str = "ai-working"
    failed_label: str = "ai-failed"
    trigger_label: str = "ai-agent"
    mention: str = "@ai-agent"

    @classmethod
    def from_settings(cls, settings) -> "NotificationConfig":
        working = tuple(settings.working_labels)
        return cls(
            marker=settings.assigned_marker,
            working_labels=working,
            active_label=working[-1] if working else "ai-working",
            failed_label=settings.failed_label,
            trigger_label=settings.trigger_label,
            mention=settings.trigger_mention,
        )


@dataclass
class Notifier:
    """Posts pipeline status to one issue."""

    github: GitHubClient
    issue_number: int
    config: NotificationConfig = field(default_factory=NotificationConfig)

    def _remove_label(self, label: str) -> None:
        try:
            self.github.remove_label(self.issue_number, label)
        except GitHubClientError as e:
            logger.debug(f"Label '{label}' not removed: {e}")

    def notify_processing_start(self, task: TaskDescriptor) -> None:
        """Post the assignment comment and mark the issue as in progress.

        Raises:
            GitHubClientError: If the comment or labels cannot be posted
        """
        body = START_COMMENT.format(
            marker=self.config.marker,
            title=task.title,
            task_type=task.task_type,
            priority=task.priority,
        )
        self.github.post_comment(self.issue_number, body)
        self.github.add_labels(self.issue_number, list(self.config.working_labels))
        logger.info(f"Posted start notification on #{self.issue_number}")

    def notify_processing_failure(self, category: str, error: str | BaseException) -> None:
        """Report a failed run. Errors here are logged, never raised."""
        body = FAILURE_COMMENT.format(
            category=category,
            error=str(error) or error.__class__.__name__,
            trigger_label=self.config.trigger_label,
            mention=self.config.mention,
        )
        try:
            self.github.post_comment(self.issue_number, body)
            self._remove_label(self.config.active_label)
            self.github.add_labels(self.issue_number, [self.config.failed_label])
        except GitHubClientError as e:
            logger.error(f"Failed to post failure notification on #{self.issue_number}: {e}")

    def notify_processing_complete(self, pr: PRData, files_modified: int) -> None:
        """Link the opened pull request and clear every working label."""
        body = COMPLETION_COMMENT.format(
            pr_number=pr.number,
            pr_url=pr.url,
            files_modified=files_modified,
        )
        self.github.post_comment(self.issue_number, body)
        for label in self.config.working_labels:
            self._remove_label(label)
        logger.info(f"Posted completion notification on #{self.issue_number}")
