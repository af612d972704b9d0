"""GitHub integration module for taskforge."""

from taskforge.github.client import GitHubClient, GitHubClientError
from taskforge.github.models import (
    IssueData,
    CommentData,
    PRData,
    PRFile,
    CIResult,
    CICheck,
    CIStatus,
    ChangeRequest,
)

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "IssueData",
    "CommentData",
    "PRData",
    "PRFile",
    "CIResult",
    "CICheck",
    "CIStatus",
    "ChangeRequest",
]
