"""Turn an evaluation into an approval decision and act on it."""

import logging

from taskforge.github.client import GitHubClient, GitHubClientError
from taskforge.prompts import APPROVE_REVIEW, REQUEST_CHANGES_REVIEW
from taskforge.review.models import ApprovalCriteria, ApprovalDecision, PREvaluation


logger = logging.getLogger(__name__)


def find_blocking_issues(issues: list[str], keywords: tuple[str, ...]) -> list[str]:
    return [issue for issue in issues if any(k in issue for k in keywords)]


def make_decision(
    evaluation: PREvaluation,
    criteria: ApprovalCriteria | None = None,
) -> ApprovalDecision:
    """Approve when the score meets the threshold and nothing blocks.

    Confidence is the score itself when approved by score and
    ``100 - score`` otherwise. Blocking issues reject the pull request
    even above the threshold and become required actions.
    """
    criteria = criteria or ApprovalCriteria()
    score = evaluation.total_score
    threshold = criteria.approval_score_threshold

    if score >= threshold:
        verb = "exceeds" if score > threshold else "meets"
        decision = ApprovalDecision(
            approved=True,
            confidence=score,
            reasoning=[f"Score {score} {verb} threshold {threshold}"],
        )
    else:
        decision = ApprovalDecision(
            approved=False,
            confidence=100 - score,
            reasoning=[f"Score {score} below threshold {threshold}"],
        )

    blocking = find_blocking_issues(evaluation.issues, criteria.blocking_keywords)
    if blocking:
        decision.approved = False
        decision.reasoning.append("Blocking issues found")
        decision.required_actions.extend(blocking)

    logger.info(
        f"Decision: {'APPROVED' if decision.approved else 'REJECTED'} "
        f"(confidence {decision.confidence}%)"
    )
    return decision


def render_request_changes(decision: ApprovalDecision) -> str:
    actions = decision.required_actions or ["Address the issues listed above"]
    return REQUEST_CHANGES_REVIEW.format(
        reasoning="\n".join(decision.reasoning),
        required_actions="\n".join(f"- {action}" for action in actions),
    )


def execute_decision(
    github: GitHubClient,
    pr_number: int,
    decision: ApprovalDecision,
    auto_merge: bool = True,
    criteria: ApprovalCriteria | None = None,
) -> bool:
    """Post the review and, for confident approvals, squash-merge.

    A failed merge is logged only; the approval has already been posted.

    Returns:
        True if the pull request was merged

    Raises:
        GitHubClientError: If the review itself cannot be posted
    """
    criteria = criteria or ApprovalCriteria()

    if not decision.approved:
        github.post_review(pr_number, render_request_changes(decision), event="REQUEST_CHANGES")
        logger.info(f"Requested changes on PR #{pr_number}")
        return False

    github.post_review(
        pr_number,
        APPROVE_REVIEW.format(score=decision.confidence),
        event="APPROVE",
    )
    logger.info(f"Approved PR #{pr_number}")

    if not auto_merge or decision.confidence < criteria.auto_merge_confidence:
        return False

    try:
        sha = github.merge_pr(pr_number, merge_method="squash")
    except GitHubClientError as e:
        logger.warning(f"Auto-merge of PR #{pr_number} failed, manual merge required: {e}")
        return False

    logger.info(f"Auto-merged PR #{pr_number} ({sha[:7]})")
    return True
