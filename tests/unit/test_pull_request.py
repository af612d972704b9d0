"""Unit tests for pull request creation."""

import pytest

from taskforge.llm.schemas import FileChange, ImplementationPlan
from taskforge.pipeline.applier import apply_plan
from taskforge.pipeline.models import TaskDescriptor
from taskforge.pipeline.pull_request import (
    branch_name,
    collect_files,
    create_implementation_pr,
    render_pr_body,
    slugify,
)


@pytest.fixture
def task():
    return TaskDescriptor(issue_number=12, title="Add contact form!", description="A contact form")


@pytest.fixture
def record(tmp_path, task):
    plan = ImplementationPlan(
        analysis="Adds the form",
        files=[
            FileChange(
                path="src/components/ContactForm.tsx",
                action="create",
                content="export {};\n",
                explanation="Form component",
            )
        ],
    )
    return apply_plan(plan, task, tmp_path)


class TestNaming:
    """Tests for branch naming."""

    def test_slugify(self):
        """Test slug normalization."""
        assert slugify("Add contact form!") == "add-contact-form"
        assert slugify("  ***  ") == "task"
        assert len(slugify("word " * 30)) <= 40
        assert not slugify("word " * 30).endswith("-")

    def test_branch_name(self, task):
        """Test the task branch name."""
        assert branch_name(task) == "ai-agent/issue-12-add-contact-form"


class TestCreateImplementationPR:
    """Tests for create_implementation_pr."""

    def test_collect_files_includes_summary(self, tmp_path, record):
        """Test that the commit carries applied files and the summary."""
        files = collect_files(record, tmp_path)
        assert set(files) == {"src/components/ContactForm.tsx", "AI_IMPLEMENTATION.md"}
        assert files["src/components/ContactForm.tsx"] == "export {};\n"

    def test_render_body(self, task, record):
        """Test the pull request body."""
        body = render_pr_body(task, record)
        assert "Resolves #12" in body
        assert "- `src/components/ContactForm.tsx` (create): Form component" in body
        assert "No additional setup required" in body

    def test_branch_commit_and_pr(self, tmp_path, recording_github, task, record):
        """Test the GitHub call sequence."""
        pr = create_implementation_pr(recording_github, task, record, tmp_path)

        assert recording_github.names() == ["create_branch", "commit_changes", "create_pull_request"]
        assert recording_github.calls[0][1] == ("ai-agent/issue-12-add-contact-form",)
        assert "AI_IMPLEMENTATION.md" in recording_github.committed

        title, head, labels = recording_github.calls[2][1]
        assert title == "feat: Add contact form!"
        assert head == "ai-agent/issue-12-add-contact-form"
        assert labels == ("ai-generated",)
        assert pr.number == 101

    def test_custom_labels(self, tmp_path, recording_github, task, record):
        """Test configured pull request labels."""
        create_implementation_pr(recording_github, task, record, tmp_path, labels=["bot"])
        assert recording_github.calls[2][1][2] == ("bot",)
