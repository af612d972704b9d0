"""Render the implementation prompt for the model."""

from dataclasses import dataclass

from taskforge.code.structure import ProjectStructure
from taskforge.pipeline.models import TaskDescriptor
from taskforge.prompts import IMPLEMENTATION_PROMPT, format_implementation_examples


@dataclass(frozen=True)
class PlatformProfile:
    """Fixed assumptions about the target project stack."""

    framework: str = "Next.js 15 with App Router"
    language: str = "TypeScript"
    styling: str = "Tailwind CSS"

    @classmethod
    def from_settings(cls, settings) -> "PlatformProfile":
        return cls(
            framework=settings.platform_framework,
            language=settings.platform_language,
            styling=settings.platform_styling,
        )


def build_prompt(
    task: TaskDescriptor,
    structure: ProjectStructure,
    platform: PlatformProfile | None = None,
) -> str:
    """Serialize the task and project snapshot into one instruction document.

    The output depends only on the arguments, so the same task and listing
    always render the same prompt.
    """
    platform = platform or PlatformProfile()
    requirements_line = (
        f"- Requirements: {task.requirements}\n" if task.requirements else ""
    )

    return IMPLEMENTATION_PROMPT.format(
        framework=platform.framework,
        language=platform.language,
        styling=platform.styling,
        file_listing=structure.format_listing(),
        issue_number=task.issue_number,
        title=task.title,
        task_type=task.task_type,
        priority=task.priority,
        description=task.description,
        requirements_line=requirements_line,
        few_shot_examples=format_implementation_examples(),
    )
