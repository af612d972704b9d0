"""Unit tests for applying implementation plans."""

import pytest

from taskforge.llm.schemas import FileChange, ImplementationPlan
from taskforge.pipeline.applier import (
    DEFAULT_INSTRUCTIONS,
    SUMMARY_FILENAME,
    ChangeApplyError,
    apply_plan,
    resolve_target,
)
from taskforge.pipeline.models import TaskDescriptor


@pytest.fixture
def task():
    return TaskDescriptor(
        issue_number=42,
        title="Add contact form",
        description="A contact form",
        task_type="Feature",
        priority="High",
    )


def _plan(*changes, instructions=None):
    files = [FileChange(path=path, action=action, content=content) for path, action, content in changes]
    return ImplementationPlan(analysis="Add the form", files=files, instructions=instructions)


class TestApplyPlan:
    """Tests for apply_plan."""

    def test_writes_files_and_summary(self, tmp_path, task):
        """Test that every file and the summary are written."""
        plan = _plan(
            ("src/components/ContactForm.tsx", "create", "export {};\n"),
            ("README.md", "modify", "# Readme\n"),
            instructions="Run npm install",
        )

        record = apply_plan(plan, task, tmp_path)

        assert (tmp_path / "src/components/ContactForm.tsx").read_text() == "export {};\n"
        assert (tmp_path / "README.md").read_text() == "# Readme\n"
        assert record.files_modified == 2
        assert [f.path for f in record.applied_files] == ["src/components/ContactForm.tsx", "README.md"]
        assert record.summary_path == SUMMARY_FILENAME
        assert record.plan_source == "parsed"

        summary = (tmp_path / SUMMARY_FILENAME).read_text()
        assert "**Issue:** #42" in summary
        assert "## Files Modified (2)" in summary
        assert "Run npm install" in summary

    def test_modify_overwrites(self, tmp_path, task):
        """Test that modify replaces the full file content."""
        (tmp_path / "page.tsx").write_text("old")
        apply_plan(_plan(("page.tsx", "modify", "new")), task, tmp_path)
        assert (tmp_path / "page.tsx").read_text() == "new"

    def test_default_instructions(self, tmp_path, task):
        """Test the instructions default."""
        record = apply_plan(_plan(("a.ts", "create", "")), task, tmp_path)
        assert record.instructions == DEFAULT_INSTRUCTIONS

    def test_records_plan_source(self, tmp_path, task):
        """Test that the interpreter stage is carried into the record."""
        plan = _plan(("a.ts", "create", "")).with_source("fallback")
        assert apply_plan(plan, task, tmp_path).plan_source == "fallback"

    @pytest.mark.parametrize("bad_path", ["../outside.ts", "src/../../outside.ts", "/etc/hosts"])
    def test_unsafe_paths_write_nothing(self, tmp_path, task, bad_path):
        """Test that an unsafe path aborts before any write."""
        root = tmp_path / "repo"
        root.mkdir()
        plan = _plan(("ok.ts", "create", "x"), (bad_path, "create", "x"))

        with pytest.raises(ChangeApplyError) as exc_info:
            apply_plan(plan, task, root)

        assert exc_info.value.path == bad_path
        assert "Failed to apply implementation" in str(exc_info.value)
        assert list(root.iterdir()) == []

    def test_write_failure(self, tmp_path, task):
        """Test that an OS error becomes a ChangeApplyError."""
        (tmp_path / "taken.ts").mkdir()
        with pytest.raises(ChangeApplyError) as exc_info:
            apply_plan(_plan(("taken.ts", "create", "x")), task, tmp_path)
        assert exc_info.value.path == "taken.ts"

    def test_record_to_dict(self, tmp_path, task):
        """Test the serialized record."""
        data = apply_plan(_plan(("a.ts", "create", "")), task, tmp_path).to_dict()
        assert data["files_modified"] == 1
        assert data["files"][0] == {"path": "a.ts", "action": "create", "explanation": ""}
        assert data["task"]["issue_number"] == 42


class TestResolveTarget:
    """Tests for resolve_target."""

    def test_nested_path(self, tmp_path):
        """Test a normal nested path."""
        root = tmp_path.resolve()
        assert resolve_target(root, "src/app/page.tsx") == root / "src/app/page.tsx"

    def test_dot_segments_inside_root(self, tmp_path):
        """Test that dot segments staying inside the root are allowed."""
        root = tmp_path.resolve()
        assert resolve_target(root, "src/../lib/a.ts") == root / "lib/a.ts"
