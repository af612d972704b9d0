"""Issue agent: runs the issue-to-pull-request pipeline as a LangGraph workflow."""

from dataclasses import dataclass, field
from typing import TypedDict

from langgraph.graph import StateGraph, END

from taskforge.agents.base import BaseAgent, AgentContext
from taskforge.code.structure import scan_project
from taskforge.config import ConfigurationError
from taskforge.github.client import GitHubClientError
from taskforge.github.models import PRData
from taskforge.llm.factory import LLMConfigError, provider_from_settings
from taskforge.llm.provider import LLMProvider
from taskforge.llm.schemas import ImplementationPlan
from taskforge.pipeline.applier import ChangeApplyError, apply_plan
from taskforge.pipeline.duplicate import check_duplicate
from taskforge.pipeline.events import IssueEvent, MissingIssueError
from taskforge.pipeline.extractor import TaskExtractionError, extract_task
from taskforge.pipeline.interpreter import interpret_response
from taskforge.pipeline.models import ChangeRecord, TaskDescriptor
from taskforge.pipeline.notifications import NotificationConfig, Notifier
from taskforge.pipeline.prompt_builder import PlatformProfile, build_prompt
from taskforge.pipeline.pull_request import create_implementation_pr
from taskforge.pipeline.trigger import validate_trigger
from taskforge.reports import SessionLog


FAILURE_CATEGORIES: tuple[tuple[type[Exception], str], ...] = (
    (ConfigurationError, "Configuration error"),
    (LLMConfigError, "Configuration error"),
    (MissingIssueError, "Missing issue"),
    (TaskExtractionError, "Issue parsing failed"),
    (ChangeApplyError, "Applying changes failed"),
    (GitHubClientError, "GitHub API error"),
)


def failure_category(error: Exception) -> str:
    for error_type, category in FAILURE_CATEGORIES:
        if isinstance(error, error_type):
            return category
    return "Unexpected error"


class IssueState(TypedDict, total=False):
    """State carried between pipeline nodes."""

    event: IssueEvent
    session: SessionLog
    status: str  # running, skipped, failed, completed
    reason: str | None
    task: TaskDescriptor | None
    plan: ImplementationPlan | None
    record: ChangeRecord | None
    pr: PRData | None
    error: str | None
    failure_category: str | None
    failed_stage: str | None


@dataclass
class IssueAgentResult:
    """Result of one pipeline run."""

    status: str
    issue_number: int | None = None
    reason: str | None = None
    task: TaskDescriptor | None = None
    plan_source: str | None = None
    files: list[str] = field(default_factory=list)
    pr_number: int | None = None
    pr_url: str | None = None
    error: str | None = None
    failure_category: str | None = None
    session_log: str | None = None

    @property
    def success(self) -> bool:
        return self.status == "completed"


class IssueAgent(BaseAgent):
    """Chains trigger, duplicate check, extraction, generation, apply and PR creation.

    Every node returns a partial state update. A node that hits a fatal
    error sets ``status`` to ``failed`` and the graph routes to the failure
    notification instead of raising.
    """

    def __init__(self, context: AgentContext, open_pull_request: bool = True):
        super().__init__(context)
        self.open_pull_request = open_pull_request
        self._llm: LLMProvider | None = context.llm_provider
        self.graph = self._build_graph()

    @property
    def llm(self) -> LLMProvider:
        if self._llm is None:
            self._llm = provider_from_settings(self.settings)
        return self._llm

    # ------------------------------------------------------------------
    # Graph
    # ------------------------------------------------------------------

    def _build_graph(self):
        workflow = StateGraph(IssueState)

        workflow.add_node("validate_trigger", self._validate_trigger_node)
        workflow.add_node("check_duplicate", self._check_duplicate_node)
        workflow.add_node("parse_issue", self._parse_issue_node)
        workflow.add_node("notify_start", self._notify_start_node)
        workflow.add_node("generate", self._generate_node)
        workflow.add_node("apply", self._apply_node)
        workflow.add_node("create_pr", self._create_pr_node)
        workflow.add_node("notify_complete", self._notify_complete_node)
        workflow.add_node("notify_failure", self._notify_failure_node)

        workflow.set_entry_point("validate_trigger")

        chain = [
            "validate_trigger",
            "check_duplicate",
            "parse_issue",
            "notify_start",
            "generate",
            "apply",
            "create_pr",
            "notify_complete",
        ]
        for current, following in zip(chain, chain[1:]):
            workflow.add_conditional_edges(
                current,
                self._route,
                {
                    "continue": following,
                    "skipped": END,
                    "failed": "notify_failure",
                },
            )
        workflow.add_edge("notify_complete", END)
        workflow.add_edge("notify_failure", END)

        return workflow.compile()

    @staticmethod
    def _route(state: IssueState) -> str:
        status = state.get("status", "running")
        if status in ("skipped", "failed"):
            return status
        return "continue"

    def _fail(self, state: IssueState, stage: str, error: Exception) -> dict:
        category = failure_category(error)
        self._log_error(f"{stage} failed ({category}): {error}")
        state["session"].record(stage, "failed", str(error), category=category)
        return {
            "status": "failed",
            "error": str(error),
            "failure_category": category,
            "failed_stage": stage,
        }

    def _notifier(self, state: IssueState) -> Notifier:
        return Notifier(
            github=self.github,
            issue_number=state["event"].require_issue().number,
            config=NotificationConfig.from_settings(self.settings),
        )

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _validate_trigger_node(self, state: IssueState) -> dict:
        settings = self.settings
        result = validate_trigger(
            state["event"],
            trigger_label=settings.trigger_label,
            mention=settings.trigger_mention,
            title_prefix=settings.trigger_title_prefix,
            guard_seconds=settings.label_guard_seconds,
        )
        state["session"].record("validate_trigger", "ok", result.reason)
        if not result.should_process:
            return {"status": "skipped", "reason": result.reason}
        return {"status": "running", "reason": result.reason}

    def _check_duplicate_node(self, state: IssueState) -> dict:
        try:
            issue = state["event"].require_issue()
            comments = self.github.list_comments(issue.number)
        except Exception as e:
            return self._fail(state, "check_duplicate", e)

        should_continue = check_duplicate(
            comments,
            bot_login=self.settings.bot_login,
            marker=self.settings.assigned_marker,
        )
        state["session"].record("check_duplicate", "ok", should_continue=should_continue)
        if not should_continue:
            self._log_info(f"Issue #{issue.number} already assigned, skipping")
            return {"status": "skipped", "reason": "already processed"}
        return {"status": "running"}

    def _parse_issue_node(self, state: IssueState) -> dict:
        try:
            task = extract_task(state["event"].require_issue())
        except Exception as e:
            return self._fail(state, "parse_issue", e)

        state["session"].record("parse_issue", "ok", task=task.to_dict())
        return {"task": task}

    def _notify_start_node(self, state: IssueState) -> dict:
        try:
            self._notifier(state).notify_processing_start(state["task"])
        except Exception as e:
            return self._fail(state, "notify_start", e)

        state["session"].record("notify_start", "ok")
        return {"status": "running"}

    async def _generate_node(self, state: IssueState) -> dict:
        task = state["task"]
        settings = self.settings
        try:
            structure = scan_project(
                self.context.workspace,
                max_depth=settings.structure_max_depth,
                limit=settings.structure_max_files,
            )
            prompt = build_prompt(task, structure, PlatformProfile.from_settings(settings))
            self._log_info(f"Requesting implementation for issue #{task.issue_number}")
            response = await self.llm.generate(prompt)
        except Exception as e:
            return self._fail(state, "generate", e)

        plan = interpret_response(response.content, task)
        state["session"].record(
            "generate",
            "ok",
            plan.source,
            model=response.model,
            files=[f.path for f in plan.files],
        )
        return {"plan": plan}

    def _apply_node(self, state: IssueState) -> dict:
        try:
            record = apply_plan(state["plan"], state["task"], self.context.workspace)
        except Exception as e:
            return self._fail(state, "apply", e)

        state["session"].record("apply", "ok", files_modified=record.files_modified)
        return {"record": record}

    def _create_pr_node(self, state: IssueState) -> dict:
        if not self.open_pull_request:
            state["session"].record("create_pr", "skipped")
            return {"status": "running"}

        try:
            pr = create_implementation_pr(
                self.github,
                state["task"],
                state["record"],
                self.context.workspace,
                labels=list(self.settings.pr_labels),
            )
        except Exception as e:
            return self._fail(state, "create_pr", e)

        state["session"].record("create_pr", "ok", pr_number=pr.number, url=pr.url)
        return {"pr": pr}

    def _notify_complete_node(self, state: IssueState) -> dict:
        pr = state.get("pr")
        if pr is not None:
            try:
                self._notifier(state).notify_processing_complete(
                    pr, state["record"].files_modified
                )
            except GitHubClientError as e:
                self._log_warning(f"Completion notification failed: {e}")
        state["session"].record("notify_complete", "ok")
        return {"status": "completed"}

    def _notify_failure_node(self, state: IssueState) -> dict:
        if state["event"].issue is not None:
            self._notifier(state).notify_processing_failure(
                state.get("failure_category") or "Unexpected error",
                state.get("error") or "",
            )
        return {"status": "failed"}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, event: IssueEvent) -> IssueAgentResult:
        """Run the pipeline for one event.

        Args:
            event: Parsed issues / issue_comment event

        Returns:
            IssueAgentResult; fatal stage errors are reported in it, not raised
        """
        issue_number = event.issue.number if event.issue else None
        session = SessionLog(issue_number=issue_number)
        initial_state: IssueState = {
            "event": event,
            "session": session,
            "status": "running",
        }

        try:
            final_state = await self.graph.ainvoke(initial_state)
        except Exception as e:
            self._log_error(f"Pipeline crashed: {e}")
            session.record("pipeline", "failed", str(e))
            final_state = {**initial_state, "status": "failed", "error": str(e)}

        log_path = session.write(self.settings.log_dir)
        plan = final_state.get("plan")
        record = final_state.get("record")
        pr = final_state.get("pr")

        result = IssueAgentResult(
            status=final_state.get("status", "failed"),
            issue_number=issue_number,
            reason=final_state.get("reason"),
            task=final_state.get("task"),
            plan_source=plan.source if plan else None,
            files=[f.path for f in record.applied_files] if record else [],
            pr_number=pr.number if pr else None,
            pr_url=pr.url if pr else None,
            error=final_state.get("error"),
            failure_category=final_state.get("failure_category"),
            session_log=str(log_path) if log_path else None,
        )
        self._log_info(f"Issue #{issue_number}: {result.status}")
        return result
