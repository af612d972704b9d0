"""Write an implementation plan to the working tree."""

import logging
from pathlib import Path

from taskforge.llm.schemas import ImplementationPlan
from taskforge.pipeline.models import AppliedFile, ChangeRecord, TaskDescriptor
from taskforge.prompts import IMPLEMENTATION_SUMMARY


logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "AI_IMPLEMENTATION.md"
DEFAULT_INSTRUCTIONS = "No additional setup required"


class ChangeApplyError(Exception):
    """Raised when a plan file cannot be written."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Failed to apply implementation for {path}: {message}")
        self.path = path


def resolve_target(root: Path, relative: str) -> Path:
    """Resolve a plan path inside ``root``.

    Raises:
        ChangeApplyError: If the path is absolute or escapes the root
    """
    candidate = Path(relative)
    if candidate.is_absolute():
        raise ChangeApplyError(relative, "absolute paths are not allowed")

    target = (root / candidate).resolve()
    if not target.is_relative_to(root):
        raise ChangeApplyError(relative, "path escapes the workspace root")
    return target


def render_summary(record: ChangeRecord) -> str:
    """Render the Markdown implementation summary."""
    task = record.task
    file_list = "\n".join(
        f"- **{f.path}** ({f.action}): {f.explanation}" for f in record.applied_files
    )
    return IMPLEMENTATION_SUMMARY.format(
        issue_number=task.issue_number,
        title=task.title,
        task_type=task.task_type,
        priority=task.priority,
        timestamp=record.timestamp.isoformat(),
        analysis=record.analysis or "_No analysis provided_",
        files_modified=record.files_modified,
        file_list=file_list,
        instructions=record.instructions,
    )


def apply_plan(
    plan: ImplementationPlan,
    task: TaskDescriptor,
    root: Path | str,
) -> ChangeRecord:
    """Write every file of the plan and the implementation summary.

    Every path is checked against the root before anything is written.
    Files are then written in plan order and the first failure aborts the
    remaining writes, so a failed apply can leave earlier files on disk.

    Args:
        plan: Validated implementation plan
        task: Task the plan implements
        root: Working tree root

    Returns:
        ChangeRecord describing the written files

    Raises:
        ChangeApplyError: On an unsafe path or the first failed write
    """
    root_path = Path(root).resolve()
    targets = [(change, resolve_target(root_path, change.path)) for change in plan.files]

    applied: list[AppliedFile] = []
    for change, target in targets:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(change.content, encoding="utf-8")
        except OSError as e:
            raise ChangeApplyError(change.path, str(e)) from e

        logger.info(f"{'Created' if change.action == 'create' else 'Modified'}: {change.path}")
        applied.append(
            AppliedFile(path=change.path, action=change.action, explanation=change.explanation)
        )

    record = ChangeRecord(
        applied_files=applied,
        analysis=plan.analysis,
        instructions=plan.instructions or DEFAULT_INSTRUCTIONS,
        task=task,
        plan_source=plan.source,
    )

    summary_path = root_path / SUMMARY_FILENAME
    try:
        summary_path.write_text(render_summary(record), encoding="utf-8")
    except OSError as e:
        raise ChangeApplyError(SUMMARY_FILENAME, str(e)) from e
    record.summary_path = SUMMARY_FILENAME

    logger.info(f"Applied {record.files_modified} file(s) for issue #{task.issue_number}")
    return record
