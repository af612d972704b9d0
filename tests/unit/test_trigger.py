"""Unit tests for trigger validation and event parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from taskforge.pipeline.events import MissingIssueError, parse_event, parse_timestamp
from taskforge.pipeline.trigger import validate_trigger


class TestParseEvent:
    """Tests for event payload parsing."""

    def test_parses_issue_fields(self, make_issue_payload):
        """Test that issue fields are extracted."""
        event = parse_event(make_issue_payload(labels=("ai-agent", "feature")))

        assert event.action == "opened"
        assert event.issue.number == 42
        assert event.issue.labels == ["ai-agent", "feature"]
        assert event.issue.author == "octocat"
        assert event.issue.created_at.tzinfo is not None
        assert event.repository == "owner/repo"
        assert event.comment is None

    def test_parses_comment(self, make_issue_payload):
        """Test that a comment is attached when present."""
        event = parse_event(make_issue_payload(comment="@ai-agent please"))
        assert event.comment.body == "@ai-agent please"

    def test_missing_issue(self):
        """Test payloads without an issue."""
        event = parse_event({"action": "created"})
        assert event.issue is None
        with pytest.raises(MissingIssueError):
            event.require_issue()

    def test_parse_timestamp_z_suffix(self):
        """Test GitHub's Z-suffixed timestamps."""
        parsed = parse_timestamp("2024-05-01T10:00:00Z")
        assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert parse_timestamp(None) is None


class TestValidateTrigger:
    """Tests for validate_trigger."""

    def test_trigger_label(self, make_issue_payload):
        """Test that the trigger label starts processing."""
        result = validate_trigger(parse_event(make_issue_payload()))
        assert result.should_process is True
        assert "label" in result.reason

    def test_label_must_match_exactly(self, make_issue_payload):
        """Test that similar labels do not trigger."""
        payload = make_issue_payload(labels=("ai-agent-later", "AI-AGENT"))
        assert validate_trigger(parse_event(payload)).should_process is False

    def test_mention_in_comment(self, make_issue_payload):
        """Test that a mention in the comment triggers."""
        payload = make_issue_payload(labels=(), comment="Hey @ai-agent, can you do this?")
        assert validate_trigger(parse_event(payload)).should_process is True

    def test_title_prefix(self, make_issue_payload):
        """Test that the title prefix triggers."""
        payload = make_issue_payload(labels=(), title="[AI] Add footer links")
        assert validate_trigger(parse_event(payload)).should_process is True

    def test_prefix_not_at_start(self, make_issue_payload):
        """Test that the prefix only counts at the start of the title."""
        payload = make_issue_payload(labels=(), title="Add footer links [AI]")
        assert validate_trigger(parse_event(payload)).should_process is False

    def test_no_trigger(self, make_issue_payload):
        """Test that an ordinary issue is not processed."""
        payload = make_issue_payload(labels=("bug",), comment="looks good")
        result = validate_trigger(parse_event(payload))
        assert result.should_process is False
        assert result.reason == "no trigger found"

    def test_no_issue_is_not_an_error(self):
        """Test that events without an issue are skipped."""
        result = validate_trigger(parse_event({"action": "created", "comment": {"body": "@ai-agent"}}))
        assert result.should_process is False

    def test_fresh_labeled_issue_is_skipped(self, make_issue_payload):
        """Test the guard against labels applied at issue creation."""
        payload = make_issue_payload(action="labeled", created_ago=timedelta(seconds=5))
        result = validate_trigger(parse_event(payload))
        assert result.should_process is False

    def test_guard_wins_over_every_trigger(self, make_issue_payload):
        """Test that the guard applies even when all triggers match."""
        payload = make_issue_payload(
            action="labeled",
            title="[AI] Task",
            comment="@ai-agent",
            created_ago=timedelta(seconds=29),
        )
        assert validate_trigger(parse_event(payload)).should_process is False

    def test_old_labeled_issue_is_processed(self, make_issue_payload):
        """Test that the guard expires after the guard window."""
        payload = make_issue_payload(action="labeled", created_ago=timedelta(minutes=5))
        assert validate_trigger(parse_event(payload)).should_process is True

    def test_guard_only_applies_to_labeled(self, make_issue_payload):
        """Test that a fresh issue opened with the label is processed."""
        payload = make_issue_payload(action="opened", created_ago=timedelta(seconds=1))
        assert validate_trigger(parse_event(payload)).should_process is True

    def test_explicit_now(self, make_issue_payload):
        """Test the guard against an injected clock."""
        event = parse_event(make_issue_payload(action="labeled"))
        created = event.issue.created_at

        early = validate_trigger(event, now=created + timedelta(seconds=10))
        late = validate_trigger(event, now=created + timedelta(seconds=30))

        assert early.should_process is False
        assert late.should_process is True

    def test_custom_vocabulary(self, make_issue_payload):
        """Test that the trigger tokens are configurable."""
        payload = make_issue_payload(labels=("bot",))
        event = parse_event(payload)
        assert validate_trigger(event, trigger_label="bot").should_process is True
        assert validate_trigger(event).should_process is False
