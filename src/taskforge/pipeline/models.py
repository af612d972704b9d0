"""Data models shared by the pipeline stages."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class TaskDescriptor:
    """Structured task extracted from one issue."""

    issue_number: int
    title: str
    description: str
    task_type: str = "Development"
    priority: str = "Medium"
    requirements: str | None = None
    author: str = ""
    labels: tuple[str, ...] = ()
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "issue_number": self.issue_number,
            "title": self.title,
            "description": self.description,
            "task_type": self.task_type,
            "priority": self.priority,
            "requirements": self.requirements,
            "author": self.author,
            "labels": list(self.labels),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class AppliedFile:
    """A file the change applier wrote."""

    path: str
    action: str
    explanation: str = ""


@dataclass
class ChangeRecord:
    """Audit record of an applied implementation plan."""

    applied_files: list[AppliedFile]
    analysis: str
    instructions: str
    task: TaskDescriptor
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    summary_path: str | None = None
    plan_source: str = "parsed"

    @property
    def files_modified(self) -> int:
        return len(self.applied_files)

    def to_dict(self) -> dict:
        return {
            "analysis": self.analysis,
            "files_modified": self.files_modified,
            "files": [
                {"path": f.path, "action": f.action, "explanation": f.explanation}
                for f in self.applied_files
            ],
            "instructions": self.instructions,
            "task": self.task.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "summary_path": self.summary_path,
            "plan_source": self.plan_source,
        }
