"""Agents that orchestrate the pipeline and the PR evaluator."""

from taskforge.agents.base import BaseAgent, AgentContext
from taskforge.agents.issue_agent import IssueAgent, IssueAgentResult, failure_category
from taskforge.agents.approver_agent import ApproverAgent, ApproverResult

__all__ = [
    "BaseAgent",
    "AgentContext",
    "IssueAgent",
    "IssueAgentResult",
    "failure_category",
    "ApproverAgent",
    "ApproverResult",
]
