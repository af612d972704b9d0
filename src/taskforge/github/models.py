"""Data models for GitHub entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class CIStatus(str, Enum):
    """CI check status."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class IssueData:
    """GitHub Issue data."""

    number: int
    title: str
    body: str
    labels: list[str] = field(default_factory=list)
    author: str = ""
    state: str = "open"
    url: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CommentData:
    """A comment posted on an issue or pull request."""

    author: str
    body: str
    id: int | None = None
    created_at: datetime | None = None


@dataclass
class PRData:
    """GitHub Pull Request data."""

    number: int
    title: str
    body: str
    head_branch: str
    base_branch: str
    labels: list[str] = field(default_factory=list)
    author: str = ""
    state: str = "open"
    url: str = ""
    mergeable: bool | None = None
    draft: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class PRFile:
    """A file touched by a pull request.

    ``patch`` is None for binary files, which GitHub returns without a diff.
    """

    path: str
    patch: str | None = None
    additions: int = 0
    deletions: int = 0
    status: str = "modified"


@dataclass
class CICheck:
    """A CI check result."""

    name: str
    status: CIStatus
    conclusion: str | None = None
    url: str | None = None
    output: str | None = None


@dataclass
class CIResult:
    """Overall CI result for a PR."""

    status: CIStatus
    checks: list[CICheck] = field(default_factory=list)


@dataclass
class ChangeRequest:
    """Everything the PR evaluator needs to score a pull request."""

    number: int
    title: str = ""
    author: str = ""
    files: list[PRFile] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0
    diff: str = ""
    checks: list[CICheck] = field(default_factory=list)
    review_state: str | None = None

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions
