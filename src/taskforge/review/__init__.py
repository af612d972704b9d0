"""Rule-based pull request evaluation."""

from taskforge.review.models import (
    CATEGORIES,
    ApprovalCriteria,
    CategoryScore,
    PREvaluation,
    ApprovalDecision,
)
from taskforge.review.rules import evaluate_change_request, calculate_total_score
from taskforge.review.decision import make_decision, execute_decision
from taskforge.review.report import write_approval_report

__all__ = [
    "CATEGORIES",
    "ApprovalCriteria",
    "CategoryScore",
    "PREvaluation",
    "ApprovalDecision",
    "evaluate_change_request",
    "calculate_total_score",
    "make_decision",
    "execute_decision",
    "write_approval_report",
]
