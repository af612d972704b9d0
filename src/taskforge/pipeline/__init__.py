"""Issue-to-pull-request pipeline stages."""

from taskforge.pipeline.models import TaskDescriptor, AppliedFile, ChangeRecord
from taskforge.pipeline.events import IssueEvent, MissingIssueError, parse_event, load_event
from taskforge.pipeline.trigger import TriggerResult, validate_trigger
from taskforge.pipeline.duplicate import check_duplicate
from taskforge.pipeline.extractor import TaskExtractionError, extract_task, parse_task_fields
from taskforge.pipeline.prompt_builder import PlatformProfile, build_prompt
from taskforge.pipeline.interpreter import ResponseParseError, interpret_response, repair_json
from taskforge.pipeline.fallback import build_fallback_plan
from taskforge.pipeline.applier import ChangeApplyError, apply_plan
from taskforge.pipeline.notifications import NotificationConfig, Notifier
from taskforge.pipeline.pull_request import create_implementation_pr

__all__ = [
    # Models
    "TaskDescriptor",
    "AppliedFile",
    "ChangeRecord",
    # Events
    "IssueEvent",
    "MissingIssueError",
    "parse_event",
    "load_event",
    # Stages
    "TriggerResult",
    "validate_trigger",
    "check_duplicate",
    "TaskExtractionError",
    "extract_task",
    "parse_task_fields",
    "PlatformProfile",
    "build_prompt",
    "ResponseParseError",
    "interpret_response",
    "repair_json",
    "build_fallback_plan",
    "ChangeApplyError",
    "apply_plan",
    "NotificationConfig",
    "Notifier",
    "create_implementation_pr",
]
