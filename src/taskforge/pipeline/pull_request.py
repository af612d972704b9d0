"""Open a pull request with an applied change set."""

import logging
import re
from pathlib import Path

from taskforge.github.client import GitHubClient
from taskforge.github.models import PRData
from taskforge.pipeline.models import ChangeRecord, TaskDescriptor
from taskforge.prompts import PR_BODY


logger = logging.getLogger(__name__)

BRANCH_PREFIX = "ai-agent"
MAX_SLUG_LENGTH = 40


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "task"


def branch_name(task: TaskDescriptor) -> str:
    """Branch for a task, e.g. ``ai-agent/issue-12-add-contact-form``."""
    return f"{BRANCH_PREFIX}/issue-{task.issue_number}-{slugify(task.title)}"


def collect_files(record: ChangeRecord, root: Path | str) -> dict[str, str]:
    """Read back every applied file plus the summary for the commit."""
    root_path = Path(root).resolve()
    paths = [f.path for f in record.applied_files]
    if record.summary_path:
        paths.append(record.summary_path)

    files: dict[str, str] = {}
    for path in paths:
        files[Path(path).as_posix()] = (root_path / path).read_text(encoding="utf-8")
    return files


def render_pr_body(task: TaskDescriptor, record: ChangeRecord) -> str:
    file_list = "\n".join(
        f"- `{f.path}` ({f.action}){': ' + f.explanation if f.explanation else ''}"
        for f in record.applied_files
    )
    return PR_BODY.format(
        issue_number=task.issue_number,
        analysis=record.analysis or "_No analysis provided_",
        file_list=file_list,
        instructions=record.instructions,
    )


def create_implementation_pr(
    github: GitHubClient,
    task: TaskDescriptor,
    record: ChangeRecord,
    root: Path | str,
    labels: list[str] | None = None,
) -> PRData:
    """Commit the change set to a new branch and open a pull request.

    Args:
        github: GitHub client for the target repository
        task: Task being implemented
        record: Result of applying the plan
        root: Working tree the plan was applied to
        labels: Labels for the pull request

    Returns:
        The created pull request
    """
    branch = branch_name(task)
    files = collect_files(record, root)

    github.create_branch(branch)
    sha = github.commit_changes(
        files=files,
        message=f"feat: {task.title}\n\nResolves #{task.issue_number}",
        branch=branch,
    )
    logger.info(f"Committed {len(files)} file(s) to {branch} ({sha[:7]})")

    pr = github.create_pull_request(
        title=f"feat: {task.title}",
        body=render_pr_body(task, record),
        head=branch,
        labels=labels if labels is not None else ["ai-generated"],
    )
    logger.info(f"Created PR #{pr.number} for issue #{task.issue_number}")
    return pr
