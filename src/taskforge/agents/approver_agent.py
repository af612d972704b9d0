"""Approver agent: evaluates a pull request and acts on the decision."""

from dataclasses import dataclass
from pathlib import Path

from taskforge.agents.base import BaseAgent, AgentContext
from taskforge.review.decision import execute_decision, make_decision
from taskforge.review.models import ApprovalCriteria, ApprovalDecision, PREvaluation
from taskforge.review.report import write_approval_report
from taskforge.review.rules import evaluate_change_request


@dataclass
class ApproverResult:
    """Result of one pull request evaluation."""

    success: bool
    pr_number: int
    evaluation: PREvaluation | None = None
    decision: ApprovalDecision | None = None
    merged: bool = False
    report_path: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "pr_number": self.pr_number,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "decision": self.decision.to_dict() if self.decision else None,
            "merged": self.merged,
            "report_path": self.report_path,
            "error": self.error,
        }


class ApproverAgent(BaseAgent):
    """Fetch, score, decide, act, report."""

    def __init__(self, context: AgentContext, criteria: ApprovalCriteria | None = None):
        super().__init__(context)
        self.criteria = criteria or ApprovalCriteria()

    async def run(
        self,
        pr_number: int,
        execute: bool = True,
        report_dir: Path | str | None = None,
    ) -> ApproverResult:
        """Evaluate a pull request.

        Args:
            pr_number: Pull request to evaluate
            execute: Post the review (and merge) instead of only scoring
            report_dir: Where to write the approval report, defaults to the log dir

        Returns:
            ApproverResult; errors are reported in it, not raised
        """
        self._log_info(f"Evaluating PR #{pr_number}")

        try:
            cr = self.github.get_change_request(pr_number)
            self._log_info(
                f"PR #{pr_number}: {len(cr.files)} files, +{cr.additions}/-{cr.deletions}, "
                f"{len(cr.checks)} checks"
            )

            evaluation = evaluate_change_request(cr, self.criteria)
            decision = make_decision(evaluation, self.criteria)

            merged = False
            if execute:
                merged = execute_decision(
                    self.github,
                    pr_number,
                    decision,
                    auto_merge=self.settings.auto_merge,
                    criteria=self.criteria,
                )

            json_path, _ = write_approval_report(
                pr_number,
                evaluation,
                decision,
                self.criteria,
                output_dir=report_dir or self.settings.log_dir,
            )

            return ApproverResult(
                success=True,
                pr_number=pr_number,
                evaluation=evaluation,
                decision=decision,
                merged=merged,
                report_path=str(json_path),
            )

        except Exception as e:
            self._log_error(f"PR approval failed: {e}")
            return ApproverResult(success=False, pr_number=pr_number, error=str(e))
