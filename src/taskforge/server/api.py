"""API endpoints for synchronous operations from GitHub Actions."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Header, Depends
from pydantic import BaseModel

from taskforge.config import get_settings
from taskforge.github.client import GitHubClient
from taskforge.agents import AgentContext, ApproverAgent
from taskforge.review.decision import render_request_changes
from taskforge.prompts import APPROVE_REVIEW


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


class EvaluateRequest(BaseModel):
    """Request body for PR evaluation."""

    pr_number: int
    repo: str
    execute: bool = False


class EvaluateResponse(BaseModel):
    """Evaluation result.

    With ``execute`` false nothing is posted; the workflow can post
    ``review_body`` itself.
    """

    status: str
    approved: bool
    confidence: int
    total_score: int
    scores: dict[str, int] = {}
    issues: list[str] = []
    recommendations: list[str] = []
    reasoning: list[str] = []
    required_actions: list[str] = []
    merged: bool = False
    review_body: str


async def verify_github_token(
    authorization: Optional[str] = Header(None),
    x_github_token: Optional[str] = Header(None),
) -> str:
    """Extract the GitHub token from headers.

    Accepts token in either:
    - Authorization: Bearer <token>
    - X-GitHub-Token: <token>
    """
    token = None

    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:]
    elif x_github_token:
        token = x_github_token

    if not token:
        raise HTTPException(
            status_code=401,
            detail="GitHub token required. Use 'Authorization: Bearer <token>' or 'X-GitHub-Token: <token>'",
        )

    return token


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_pr(
    request: EvaluateRequest,
    github_token: str = Depends(verify_github_token),
) -> EvaluateResponse:
    """Score a pull request and optionally post the review."""
    settings = get_settings()
    logger.info(f"Evaluation request for PR #{request.pr_number} in {request.repo}")

    try:
        github_client = GitHubClient(token=github_token, repo_name=request.repo)
        context = AgentContext(github_client=github_client, settings=settings)
        result = await ApproverAgent(context).run(
            pr_number=request.pr_number,
            execute=request.execute,
        )
    except Exception as e:
        logger.exception(f"Error evaluating PR #{request.pr_number}")
        raise HTTPException(status_code=500, detail=str(e))

    if not result.success:
        raise HTTPException(status_code=500, detail=result.error)

    evaluation = result.evaluation
    decision = result.decision
    if decision.approved:
        review_body = APPROVE_REVIEW.format(score=decision.confidence)
    else:
        review_body = render_request_changes(decision)

    return EvaluateResponse(
        status="success",
        approved=decision.approved,
        confidence=decision.confidence,
        total_score=evaluation.total_score,
        scores={name: s.score for name, s in evaluation.scores.items()},
        issues=evaluation.issues,
        recommendations=evaluation.recommendations,
        reasoning=decision.reasoning,
        required_actions=decision.required_actions,
        merged=result.merged,
        review_body=review_body,
    )


@router.get("/health")
async def api_health():
    """API health check."""
    return {"status": "healthy", "api": "v1"}
