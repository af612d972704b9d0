"""Webhook handlers for GitHub events."""

import hashlib
import hmac
import logging
from dataclasses import dataclass
from enum import Enum

from fastapi import Request, HTTPException

from taskforge.config import get_settings
from taskforge.github.client import GitHubClient
from taskforge.agents import AgentContext, IssueAgent, ApproverAgent
from taskforge.pipeline.events import parse_event


logger = logging.getLogger(__name__)

# Issues with a run in progress in this process
# Format: {"owner/repo#issue-<number>": True}
_processing_issues: dict[str, bool] = {}

PR_ACTIONS = ("opened", "synchronize", "reopened", "labeled")


def get_issue_processing_key(repo: str, issue_number: int) -> str:
    """Generate key for issue processing tracking."""
    return f"{repo}#issue-{issue_number}"


def mark_issue_processing(repo: str, issue_number: int) -> bool:
    """Claim an issue for this process. Returns False if already claimed."""
    key = get_issue_processing_key(repo, issue_number)
    if _processing_issues.get(key, False):
        return False
    _processing_issues[key] = True
    return True


def clear_issue_processing(repo: str, issue_number: int) -> None:
    """Release the claim on an issue."""
    _processing_issues.pop(get_issue_processing_key(repo, issue_number), None)


class WebhookEvent(str, Enum):
    """Supported webhook events."""

    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST = "pull_request"


@dataclass
class WebhookPayload:
    """Parsed webhook payload."""

    event: str
    action: str
    repository: str
    sender: str
    data: dict


async def verify_webhook_signature(request: Request, body: bytes) -> bool:
    """Verify the webhook signature from GitHub.

    Raises:
        HTTPException: If signature is missing or invalid
    """
    settings = get_settings()

    if not settings.github_webhook_secret:
        logger.warning("Webhook secret not configured, skipping verification")
        return True

    signature_header = request.headers.get("X-Hub-Signature-256", "")
    if not signature_header:
        raise HTTPException(status_code=401, detail="Missing signature header")

    expected_signature = (
        "sha256="
        + hmac.new(
            settings.github_webhook_secret.encode(),
            body,
            hashlib.sha256,
        ).hexdigest()
    )

    if not hmac.compare_digest(signature_header, expected_signature):
        raise HTTPException(status_code=401, detail="Invalid signature")

    return True


def parse_webhook_payload(event_type: str, payload: dict) -> WebhookPayload:
    return WebhookPayload(
        event=event_type,
        action=payload.get("action", ""),
        repository=(payload.get("repository") or {}).get("full_name", ""),
        sender=(payload.get("sender") or {}).get("login", ""),
        data=payload,
    )


def build_context(repository: str) -> AgentContext:
    """Create the agent context for a repository from settings."""
    settings = get_settings()
    github_client = GitHubClient(
        token=settings.require_github_token(),
        repo_name=repository or settings.github_repository,
    )
    return AgentContext(github_client=github_client, settings=settings)


async def handle_issue_event(payload: WebhookPayload) -> dict:
    """Run the issue pipeline for issues and issue_comment events."""
    issue = payload.data.get("issue") or {}
    issue_number = issue.get("number")

    if not issue_number:
        return {"status": "skipped", "reason": "no issue in payload"}

    # issue_comment also fires for pull requests
    if "pull_request" in issue:
        return {"status": "skipped", "reason": "comment on a pull request"}

    if payload.event == WebhookEvent.ISSUE_COMMENT and payload.action != "created":
        return {"status": "skipped", "reason": f"unsupported action: {payload.action}"}

    # Opened and labeled events can arrive together
    if not mark_issue_processing(payload.repository, issue_number):
        logger.info(f"Skipping issue #{issue_number} - already being processed")
        return {"status": "skipped", "reason": "already processing"}

    try:
        agent = IssueAgent(build_context(payload.repository))
        result = await agent.run(parse_event(payload.data))
        if result.success:
            logger.info(f"Processed issue #{issue_number}: {result.pr_url}")
        return {
            "status": result.status,
            "reason": result.reason,
            "pr_url": result.pr_url,
            "error": result.error,
        }
    except Exception as e:
        logger.exception(f"Error processing issue #{issue_number}")
        return {"status": "error", "error": str(e)}
    finally:
        clear_issue_processing(payload.repository, issue_number)


async def handle_pull_request_event(payload: WebhookPayload) -> dict:
    """Evaluate generated pull requests."""
    settings = get_settings()
    pr = payload.data.get("pull_request") or {}
    pr_number = pr.get("number")
    labels = [label.get("name") for label in pr.get("labels") or []]

    if payload.action not in PR_ACTIONS:
        return {"status": "skipped", "reason": f"unsupported action: {payload.action}"}

    if not any(label in labels for label in settings.pr_labels):
        return {"status": "skipped", "reason": "not a generated pull request"}

    try:
        agent = ApproverAgent(build_context(payload.repository))
        result = await agent.run(pr_number=pr_number)
    except Exception as e:
        logger.exception(f"Error evaluating PR #{pr_number}")
        return {"status": "error", "error": str(e)}

    if not result.success:
        return {"status": "error", "error": result.error}
    return {
        "status": "success",
        "approved": result.decision.approved,
        "score": result.evaluation.total_score,
        "merged": result.merged,
    }


async def handle_webhook(event_type: str, payload: dict) -> dict:
    """Route a webhook to its handler."""
    parsed = parse_webhook_payload(event_type, payload)

    logger.info(
        f"Received webhook: {event_type}/{parsed.action} "
        f"from {parsed.repository or 'N/A'} by {parsed.sender}"
    )

    if event_type in (WebhookEvent.ISSUES, WebhookEvent.ISSUE_COMMENT):
        return await handle_issue_event(parsed)

    elif event_type == WebhookEvent.PULL_REQUEST:
        return await handle_pull_request_event(parsed)

    else:
        logger.debug(f"Ignoring event type: {event_type}")
        return {"status": "ignored", "event": event_type}
