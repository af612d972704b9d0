"""Pytest fixtures for taskforge tests."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock

from taskforge.config import Settings
from taskforge.github.client import GitHubClientError
from taskforge.github.models import ChangeRequest, CICheck, CIStatus, CommentData, PRData, PRFile


VALID_PLAN = {
    "analysis": "Add a contact form component",
    "files": [
        {
            "path": "src/components/ContactForm.tsx",
            "action": "create",
            "content": 'export default function ContactForm() {\n  return <form className="p-4" />;\n}\n',
            "explanation": "Contact form component",
        },
        {
            "path": "src/components/ContactForm.test.tsx",
            "action": "create",
            "content": "test('renders', () => {});\n",
            "explanation": "Component test",
        },
    ],
    "instructions": "Run npm install",
}


class RecordingGitHub:
    """GitHub client double that records every call.

    Reads are served from canned data; methods named in ``fail_on`` raise
    GitHubClientError. Labels behave like GitHub: removing an absent label
    fails.
    """

    def __init__(self, comments=None, change_request=None, fail_on=()):
        self.calls: list[tuple[str, tuple]] = []
        self.comments: list[CommentData] = list(comments or [])
        self.change_request = change_request
        self.fail_on = set(fail_on)
        self.labels: set[str] = set()
        self.committed: dict[str, str] = {}
        self.reviews: list[tuple[str, str]] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise GitHubClientError(f"{name} failed")

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def list_comments(self, issue_number):
        self._record("list_comments", issue_number)
        return list(self.comments)

    def post_comment(self, issue_number, body):
        self._record("post_comment", issue_number, body)
        self.comments.append(CommentData(author="github-actions[bot]", body=body))

    def add_labels(self, issue_number, labels):
        self._record("add_labels", issue_number, tuple(labels))
        self.labels.update(labels)

    def remove_label(self, issue_number, label):
        self._record("remove_label", issue_number, label)
        if label not in self.labels:
            raise GitHubClientError(f"Label '{label}' does not exist")
        self.labels.discard(label)

    def create_branch(self, branch_name, from_ref=None):
        self._record("create_branch", branch_name)

    def commit_changes(self, files, message, branch):
        self._record("commit_changes", branch, message)
        self.committed = dict(files)
        return "abc1234def5678"

    def create_pull_request(self, title, body, head, base=None, labels=None):
        self._record("create_pull_request", title, head, tuple(labels or ()))
        return PRData(
            number=101,
            title=title,
            body=body,
            head_branch=head,
            base_branch=base or "main",
            labels=list(labels or []),
            url="https://github.com/owner/repo/pull/101",
        )

    def get_change_request(self, pr_number):
        self._record("get_change_request", pr_number)
        return self.change_request

    def post_review(self, pr_number, body, event="COMMENT"):
        self._record("post_review", pr_number, event)
        self.reviews.append((event, body))

    def merge_pr(self, pr_number, merge_method="squash"):
        self._record("merge_pr", pr_number, merge_method)
        return "feedface1234"


@pytest.fixture
def recording_github():
    """GitHub double with an empty comment history."""
    return RecordingGitHub()


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and pointed at tmp_path."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return Settings(
        _env_file=None,
        github_token="test-token",
        github_repository="owner/repo",
        anthropic_api_key="test-key",
        workspace_path=str(workspace),
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def mock_llm_provider():
    """Mock LLM provider replying with a valid plan."""
    from taskforge.llm.provider import LLMResponse

    provider = AsyncMock()
    provider.generate.return_value = LLMResponse(
        content=f"```json\n{json.dumps(VALID_PLAN, indent=2)}\n```",
        model="test-model",
        usage={"prompt_tokens": 100, "completion_tokens": 200},
        raw_response={},
    )
    return provider


@pytest.fixture
def make_issue_payload():
    """Factory for issues / issue_comment event payloads."""

    def _make(
        number=42,
        title="Add contact form",
        body="### Task Description\nAdd a contact form to the contact page",
        labels=("ai-agent",),
        action="opened",
        created_ago=timedelta(hours=1),
        comment=None,
    ):
        created = datetime.now(timezone.utc) - created_ago
        payload = {
            "action": action,
            "issue": {
                "number": number,
                "title": title,
                "body": body,
                "labels": [{"name": name} for name in labels],
                "user": {"login": "octocat"},
                "state": "open",
                "html_url": f"https://github.com/owner/repo/issues/{number}",
                "created_at": created.isoformat().replace("+00:00", "Z"),
            },
            "repository": {"full_name": "owner/repo"},
            "sender": {"login": "octocat"},
        }
        if comment is not None:
            payload["comment"] = {"id": 7, "body": comment, "user": {"login": "octocat"}}
        return payload

    return _make


@pytest.fixture
def make_change_request():
    """Factory for change requests the evaluator scores."""

    def _make(files=None, checks=None, diff="", additions=None, deletions=0):
        files = files if files is not None else [
            PRFile(path="src/components/Badge.tsx", patch="+export default Badge", additions=20),
            PRFile(path="src/components/Badge.test.tsx", patch="+test('badge')", additions=15),
            PRFile(path="README.md", patch="+Badge docs", additions=5),
        ]
        checks = checks if checks is not None else [
            CICheck(name="build", status=CIStatus.SUCCESS, conclusion="success"),
            CICheck(name="test", status=CIStatus.SUCCESS, conclusion="success"),
        ]
        if additions is None:
            additions = sum(f.additions for f in files)
        return ChangeRequest(
            number=7,
            title="feat: add badge",
            author="github-actions[bot]",
            files=files,
            additions=additions,
            deletions=deletions,
            diff=diff or "\n".join(f.patch or "" for f in files),
            checks=checks,
        )

    return _make


@pytest.fixture
def make_github():
    """Factory for GitHub doubles with canned data or failing methods."""
    return RecordingGitHub
