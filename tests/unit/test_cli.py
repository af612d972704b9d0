"""Unit tests for the CLI stage commands."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from taskforge.agents.issue_agent import IssueAgentResult
from taskforge.cli import main, write_outputs


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "github_output"


@pytest.fixture
def event_file(tmp_path, make_issue_payload):
    def _write(payload=None):
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload if payload is not None else make_issue_payload()))
        return str(path)

    return _write


def _outputs(path):
    """Parse single-line step outputs."""
    outputs = {}
    for line in path.read_text().splitlines():
        key, _, value = line.partition("=")
        outputs[key] = value
    return outputs


class TestWriteOutputs:
    """Tests for write_outputs."""

    def test_multiline_values_use_delimiter(self, output_file, monkeypatch):
        """Test the heredoc form for multiline values."""
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
        write_outputs({"a": "1", "b": "x\ny"})
        assert output_file.read_text() == "a=1\nb<<__TASKFORGE__\nx\ny\n__TASKFORGE__\n"

    def test_without_output_file(self, monkeypatch, capsys):
        """Test that outputs are echoed when GITHUB_OUTPUT is unset."""
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        write_outputs({"a": "1"})
        assert "a=1" in capsys.readouterr().out


class TestStageCommands:
    """Tests for the per-stage commands."""

    def test_trigger(self, runner, settings, event_file, output_file):
        """Test trigger outputs for a labeled issue."""
        with patch("taskforge.cli.get_settings", return_value=settings):
            result = runner.invoke(
                main,
                ["trigger", "--event-path", event_file()],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        outputs = _outputs(output_file)
        assert outputs["should-process"] == "true"
        assert json.loads(outputs["issue-data"])["number"] == 42

    def test_trigger_not_matched(self, runner, settings, event_file, output_file, make_issue_payload):
        """Test trigger outputs for an ordinary issue."""
        path = event_file(make_issue_payload(labels=("bug",)))
        with patch("taskforge.cli.get_settings", return_value=settings):
            result = runner.invoke(
                main, ["trigger", "--event-path", path], env={"GITHUB_OUTPUT": str(output_file)}
            )

        assert result.exit_code == 0
        assert _outputs(output_file) == {"should-process": "false"}

    def test_missing_event_file(self, runner, settings):
        """Test that a missing event file exits non-zero."""
        with patch("taskforge.cli.get_settings", return_value=settings):
            result = runner.invoke(main, ["trigger"], env={"GITHUB_EVENT_PATH": ""})
        assert result.exit_code == 1

    def test_check_duplicate(self, runner, settings, event_file, output_file, recording_github):
        """Test a first-time issue."""
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=recording_github):
            result = runner.invoke(
                main,
                ["check-duplicate", "--event-path", event_file()],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        assert _outputs(output_file) == {"should-continue": "true"}
        assert recording_github.calls == [("list_comments", (42,))]

    def test_check_duplicate_error(self, runner, settings, event_file, output_file, make_github):
        """Test that a GitHub error stops the workflow."""
        github = make_github(fail_on={"list_comments"})
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=github):
            result = runner.invoke(
                main,
                ["check-duplicate", "--event-path", event_file()],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 1
        assert _outputs(output_file) == {"should-continue": "false"}

    def test_parse_issue(self, runner, settings, event_file, output_file):
        """Test task extraction output."""
        with patch("taskforge.cli.get_settings", return_value=settings):
            result = runner.invoke(
                main,
                ["parse-issue", "--event-path", event_file()],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        task = json.loads(_outputs(output_file)["task-data"])
        assert task["issue_number"] == 42
        assert task["description"] == "Add a contact form to the contact page"

    def test_parse_issue_without_issue(self, runner, settings, event_file):
        """Test that an event without an issue fails."""
        with patch("taskforge.cli.get_settings", return_value=settings):
            result = runner.invoke(main, ["parse-issue", "--event-path", event_file({"action": "opened"})])
        assert result.exit_code == 1


class TestRunCommands:
    """Tests for the run and evaluate-pr commands."""

    def test_run(self, runner, settings, event_file, output_file, recording_github):
        """Test that the pipeline result becomes step outputs."""
        agent_result = IssueAgentResult(
            status="completed",
            issue_number=42,
            plan_source="parsed",
            files=["src/components/ContactForm.tsx"],
            pr_number=101,
            pr_url="https://github.com/owner/repo/pull/101",
        )
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=recording_github), \
             patch("taskforge.cli.IssueAgent") as mock_agent:
            mock_agent.return_value.run = AsyncMock(return_value=agent_result)
            result = runner.invoke(
                main,
                ["run", "--event-path", event_file(), "--no-pr"],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        assert mock_agent.call_args.kwargs["open_pull_request"] is False
        outputs = _outputs(output_file)
        assert outputs["status"] == "completed"
        assert json.loads(outputs["implementation-result"])["pr_url"].endswith("/pull/101")

    def test_run_failed(self, runner, settings, event_file, recording_github):
        """Test that a failed pipeline exits non-zero."""
        agent_result = IssueAgentResult(
            status="failed",
            error="boom",
            failure_category="Unexpected error",
        )
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=recording_github), \
             patch("taskforge.cli.IssueAgent") as mock_agent:
            mock_agent.return_value.run = AsyncMock(return_value=agent_result)
            result = runner.invoke(main, ["run", "--event-path", event_file()])

        assert result.exit_code == 1

    def test_evaluate_pr(
        self, runner, settings, output_file, tmp_path, make_github, make_change_request
    ):
        """Test scoring, approval and merge of a clean pull request."""
        github = make_github(change_request=make_change_request())
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=github):
            result = runner.invoke(
                main,
                ["evaluate-pr", "7", "--report-dir", str(tmp_path / "reports")],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        assert "Final Decision: APPROVED" in result.output
        assert _outputs(output_file) == {"approved": "true", "score": "99", "merged": "true"}
        assert list((tmp_path / "reports").glob("pr-approval-report-7-*.json"))

    def test_evaluate_pr_score_only(
        self, runner, settings, output_file, tmp_path, make_github, make_change_request
    ):
        """Test --no-execute leaves the pull request untouched."""
        github = make_github(change_request=make_change_request(checks=[]))
        with patch("taskforge.cli.get_settings", return_value=settings), \
             patch("taskforge.cli._github_client", return_value=github):
            result = runner.invoke(
                main,
                ["evaluate-pr", "7", "--no-execute", "--report-dir", str(tmp_path)],
                env={"GITHUB_OUTPUT": str(output_file)},
            )

        assert result.exit_code == 0
        assert github.names() == ["get_change_request"]
        assert _outputs(output_file)["merged"] == "false"
