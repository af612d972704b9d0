"""Approval report artifacts."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from taskforge.review.models import ApprovalCriteria, ApprovalDecision, PREvaluation


logger = logging.getLogger(__name__)


def render_report_markdown(
    pr_number: int,
    evaluation: PREvaluation,
    decision: ApprovalDecision,
    timestamp: datetime,
) -> str:
    lines = [
        f"# PR Approval Report - PR #{pr_number}",
        "",
        f"- **Generated:** {timestamp.isoformat()}",
        f"- **Final Decision:** {'APPROVED ✅' if decision.approved else 'REJECTED ❌'}",
        f"- **Confidence:** {decision.confidence}%",
        f"- **Total Score:** {evaluation.total_score}/100",
        "",
        "## Score Breakdown",
        "",
        "| Category | Score |",
        "| --- | --- |",
    ]
    lines += [f"| {name} | {s.score}/100 |" for name, s in evaluation.scores.items()]

    sections = (
        ("Reasoning", decision.reasoning),
        ("Required Actions", decision.required_actions),
        ("Issues Found", evaluation.issues),
        ("Recommendations", evaluation.recommendations),
    )
    for title, items in sections:
        if items:
            lines += ["", f"## {title}", ""]
            lines += [f"- {item}" for item in items]

    return "\n".join(lines) + "\n"


def write_approval_report(
    pr_number: int,
    evaluation: PREvaluation,
    decision: ApprovalDecision,
    criteria: ApprovalCriteria,
    output_dir: Path | str = ".",
) -> tuple[Path, Path]:
    """Write the JSON and Markdown approval reports.

    Returns:
        Paths of the JSON and Markdown files
    """
    timestamp = datetime.now(timezone.utc)
    stamp = int(timestamp.timestamp() * 1000)
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    base = directory / f"pr-approval-report-{pr_number}-{stamp}"
    json_path = base.with_suffix(".json")
    md_path = base.with_suffix(".md")

    report = {
        "pr_number": pr_number,
        "timestamp": timestamp.isoformat(),
        "evaluation": evaluation.to_dict(),
        "decision": decision.to_dict(),
        "approval_criteria": criteria.to_dict(),
    }
    json_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    md_path.write_text(
        render_report_markdown(pr_number, evaluation, decision, timestamp),
        encoding="utf-8",
    )

    logger.info(f"Approval report saved to {json_path}")
    return json_path, md_path
