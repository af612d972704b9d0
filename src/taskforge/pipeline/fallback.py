"""Synthesize a minimal plan when a model reply cannot be recovered."""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from taskforge.llm.schemas import FileChange, ImplementationPlan
from taskforge.pipeline.models import TaskDescriptor


logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 1000
DEFAULT_ANALYSIS = (
    "The model response could not be parsed. A placeholder implementation "
    "was generated for manual review."
)

_ANALYSIS = re.compile(r'"analysis"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_WORD = re.compile(r"[A-Za-z0-9]+")
_FILLER_WORDS = {
    "ai",
    "a",
    "an",
    "the",
    "add",
    "create",
    "new",
    "build",
    "make",
    "implement",
    "component",
    "page",
    "for",
    "to",
    "with",
}


@dataclass(frozen=True)
class FallbackTemplate:
    """Placeholder files for tasks mentioning ``keyword``."""

    keyword: str
    build: Callable[[TaskDescriptor], list[FileChange]]


def extract_analysis(raw: str) -> str | None:
    """Best-effort recovery of the ``analysis`` value from broken JSON."""
    match = _ANALYSIS.search(raw)
    if not match:
        return None
    fragment = match.group(1)
    try:
        return json.loads(f'"{fragment}"').strip() or None
    except json.JSONDecodeError:
        return fragment.replace("\\n", "\n").strip() or None


def _name_words(task: TaskDescriptor) -> list[str]:
    return [w for w in _WORD.findall(task.title) if w.lower() not in _FILLER_WORDS]


def _component_files(task: TaskDescriptor) -> list[FileChange]:
    name = "".join(w[:1].upper() + w[1:] for w in _name_words(task)) or "NewComponent"
    content = (
        f"// Placeholder generated for issue #{task.issue_number}: {task.title}\n"
        f"// TODO: implement. The generated implementation could not be parsed.\n"
        f"\n"
        f"export default function {name}() {{\n"
        f"  return <div>{name}</div>;\n"
        f"}}\n"
    )
    return [
        FileChange(
            path=f"src/components/{name}.tsx",
            action="create",
            content=content,
            explanation=f"Placeholder {name} component",
        )
    ]


def _page_files(task: TaskDescriptor) -> list[FileChange]:
    slug = "-".join(w.lower() for w in _name_words(task)) or "new-page"
    content = (
        f"// Placeholder generated for issue #{task.issue_number}: {task.title}\n"
        f"// TODO: implement. The generated implementation could not be parsed.\n"
        f"\n"
        f"export default function Page() {{\n"
        f"  return <main>{task.title}</main>;\n"
        f"}}\n"
    )
    return [
        FileChange(
            path=f"src/app/{slug}/page.tsx",
            action="create",
            content=content,
            explanation=f"Placeholder page at /{slug}",
        )
    ]


TEMPLATES: tuple[FallbackTemplate, ...] = (
    FallbackTemplate("component", _component_files),
    FallbackTemplate("page", _page_files),
)


def _failure_document(raw: str, task: TaskDescriptor | None, error: Exception | None) -> FileChange:
    preview = raw[:PREVIEW_LIMIT]
    if len(raw) > PREVIEW_LIMIT:
        preview += "\n... (truncated)"

    lines = ["# AI Implementation Fallback", ""]
    if task is not None:
        lines += [
            f"- **Issue:** #{task.issue_number}",
            f"- **Title:** {task.title}",
            f"- **Type:** {task.task_type}",
            "",
            "## Description",
            task.description,
            "",
        ]
    lines += [
        "## Failure",
        f"The model response could not be parsed: {error or 'unknown error'}",
        "",
        "## Raw Response Preview",
        "```",
        preview,
        "```",
        "",
    ]

    path = f"docs/ai-agent/issue-{task.issue_number}.md" if task else "AI_FALLBACK.md"
    return FileChange(
        path=path,
        action="create",
        content="\n".join(lines),
        explanation="Records the unparseable model response for manual follow-up",
    )


def build_fallback_plan(
    raw: str,
    task: TaskDescriptor | None = None,
    error: Exception | None = None,
) -> ImplementationPlan:
    """Build a plan that always holds at least one file.

    Tasks whose title or description mention a templated keyword get
    placeholder source files; anything else gets one Markdown document
    describing the failure with a preview of the reply.
    """
    files: list[FileChange] = []
    if task is not None:
        text = f"{task.title} {task.description}".lower()
        for template in TEMPLATES:
            if template.keyword in text:
                files = template.build(task)
                logger.info(f"Using '{template.keyword}' fallback template")
                break

    if not files:
        files = [_failure_document(raw, task, error)]

    plan = ImplementationPlan(
        analysis=extract_analysis(raw) or DEFAULT_ANALYSIS,
        files=files,
        instructions="Review and complete the placeholder implementation manually.",
    )
    return plan.with_source("fallback")
