"""CLI interface for taskforge.

Stage commands read the event file GitHub Actions provides at
``$GITHUB_EVENT_PATH`` and, when ``$GITHUB_OUTPUT`` is set, write their
results there as step outputs.
"""

import asyncio
import json
import os
import sys
from pathlib import Path

import click

from taskforge.agents import AgentContext, ApproverAgent, IssueAgent
from taskforge.config import ConfigurationError, configure_logging, get_settings
from taskforge.github.client import GitHubClient, GitHubClientError
from taskforge.pipeline.duplicate import check_duplicate
from taskforge.pipeline.events import IssueEvent, MissingIssueError, load_event
from taskforge.pipeline.extractor import TaskExtractionError, extract_task
from taskforge.pipeline.trigger import validate_trigger


def write_outputs(outputs: dict[str, str]) -> None:
    """Append step outputs to ``$GITHUB_OUTPUT`` and echo them."""
    for key, value in outputs.items():
        click.echo(f"{key}={value}")

    output_path = os.getenv("GITHUB_OUTPUT")
    if not output_path:
        return
    with open(output_path, "a", encoding="utf-8") as fh:
        for key, value in outputs.items():
            if "\n" in value:
                fh.write(f"{key}<<__TASKFORGE__\n{value}\n__TASKFORGE__\n")
            else:
                fh.write(f"{key}={value}\n")


def _load(event_path: str | None) -> IssueEvent:
    if not event_path:
        click.echo("Error: no event file. Pass --event-path or set GITHUB_EVENT_PATH", err=True)
        sys.exit(1)
    try:
        return load_event(event_path)
    except (OSError, ValueError) as e:
        click.echo(f"Error reading event file: {e}", err=True)
        sys.exit(1)


def _github_client(repo: str | None = None) -> GitHubClient:
    settings = get_settings()
    return GitHubClient(
        token=settings.require_github_token(),
        repo_name=repo or settings.github_repository or None,
    )


event_option = click.option(
    "--event-path",
    type=click.Path(),
    envvar="GITHUB_EVENT_PATH",
    default=None,
    help="Event payload file (defaults to GITHUB_EVENT_PATH)",
)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """taskforge - issue-driven code generation for GitHub repositories."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


@main.command()
@event_option
def trigger(event_path: str | None) -> None:
    """Decide whether the event should start the pipeline."""
    settings = get_settings()
    event = _load(event_path)
    result = validate_trigger(
        event,
        trigger_label=settings.trigger_label,
        mention=settings.trigger_mention,
        title_prefix=settings.trigger_title_prefix,
        guard_seconds=settings.label_guard_seconds,
    )

    outputs = {"should-process": str(result.should_process).lower()}
    if result.should_process and event.issue is not None:
        issue = event.issue
        outputs["issue-data"] = json.dumps(
            {
                "number": issue.number,
                "title": issue.title,
                "body": issue.body,
                "labels": issue.labels,
                "author": issue.author,
            }
        )
    write_outputs(outputs)


@main.command("check-duplicate")
@event_option
def check_duplicate_command(event_path: str | None) -> None:
    """Check whether the issue was already picked up."""
    settings = get_settings()
    event = _load(event_path)
    try:
        issue = event.require_issue()
        comments = _github_client(event.repository).list_comments(issue.number)
    except (MissingIssueError, ConfigurationError, GitHubClientError) as e:
        click.echo(f"Duplicate check failed: {e}", err=True)
        write_outputs({"should-continue": "false"})
        sys.exit(1)

    should_continue = check_duplicate(
        comments,
        bot_login=settings.bot_login,
        marker=settings.assigned_marker,
    )
    write_outputs({"should-continue": str(should_continue).lower()})


@main.command("parse-issue")
@event_option
def parse_issue(event_path: str | None) -> None:
    """Extract the structured task from the issue."""
    event = _load(event_path)
    try:
        task = extract_task(event.require_issue())
    except (MissingIssueError, TaskExtractionError) as e:
        click.echo(f"Issue parsing failed: {e}", err=True)
        sys.exit(1)

    write_outputs({"task-data": json.dumps(task.to_dict())})


@main.command()
@event_option
@click.option(
    "--workspace",
    type=click.Path(file_okay=False),
    default=None,
    help="Working tree to write changes to (defaults to WORKSPACE_PATH)",
)
@click.option("--no-pr", is_flag=True, help="Apply changes locally without opening a PR")
def run(event_path: str | None, workspace: str | None, no_pr: bool) -> None:
    """Run the whole pipeline for the event."""
    settings = get_settings()
    event = _load(event_path)

    try:
        context = AgentContext(
            github_client=_github_client(event.repository),
            settings=settings,
            workspace_path=Path(workspace) if workspace else None,
        )
    except (ConfigurationError, GitHubClientError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = asyncio.run(IssueAgent(context, open_pull_request=not no_pr).run(event))

    write_outputs(
        {
            "status": result.status,
            "implementation-result": json.dumps(
                {
                    "status": result.status,
                    "files": result.files,
                    "plan_source": result.plan_source,
                    "pr_url": result.pr_url,
                }
            ),
        }
    )
    if result.status == "failed":
        click.echo(f"Pipeline failed ({result.failure_category}): {result.error}", err=True)
        sys.exit(1)


@main.command("evaluate-pr")
@click.argument("pr_number", type=int)
@click.option("--repo", default=None, help="owner/name (defaults to GITHUB_REPOSITORY)")
@click.option("--no-execute", is_flag=True, help="Score only; do not post a review or merge")
@click.option(
    "--report-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the approval report (defaults to LOG_DIR)",
)
def evaluate_pr(pr_number: int, repo: str | None, no_execute: bool, report_dir: str | None) -> None:
    """Score a pull request and approve or request changes."""
    settings = get_settings()
    try:
        context = AgentContext(github_client=_github_client(repo), settings=settings)
    except (ConfigurationError, GitHubClientError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = asyncio.run(
        ApproverAgent(context).run(pr_number, execute=not no_execute, report_dir=report_dir)
    )
    if not result.success:
        click.echo(f"PR approval failed: {result.error}", err=True)
        sys.exit(1)

    evaluation = result.evaluation
    decision = result.decision
    click.echo(f"Final Decision: {'APPROVED' if decision.approved else 'REJECTED'}")
    click.echo(f"Confidence: {decision.confidence}%")
    click.echo(f"Total Score: {evaluation.total_score}/100")
    for name, score in evaluation.scores.items():
        click.echo(f"  {name}: {score.score}/100")
    for issue in evaluation.issues:
        click.echo(f"  - {issue}")
    click.echo(f"Report saved to: {result.report_path}")

    write_outputs(
        {
            "approved": str(decision.approved).lower(),
            "score": str(evaluation.total_score),
            "merged": str(result.merged).lower(),
        }
    )


@main.command()
def serve() -> None:
    """Run the webhook server."""
    from taskforge.server.main import run as run_server

    run_server()


if __name__ == "__main__":
    main()
