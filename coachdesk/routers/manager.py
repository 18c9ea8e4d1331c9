import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List
from coachdesk.database import get_db
from coachdesk.core.auth import get_current_user, ensure_allowed
from coachdesk.core.policy import Action, is_admin, is_allowed
from coachdesk.models.user import User, Role
from coachdesk.schemas.campaign import KpiResponse, ScoringFormResponse
from coachdesk.schemas.dashboard import TeamMember
from coachdesk.schemas.scoring import (
    ScorePreviewRequest, ScorePreviewResponse, ScoreSubmission,
    SubmissionResponse, CoachingLogResponse
)
from coachdesk.services import coaching
from coachdesk.services.errors import (
    ScoringValidationError, CatalogUnavailableError, SubmissionPersistenceError
)
from coachdesk.services.kpi_catalog import get_enabled_kpis
from coachdesk.services.submission import preview_rating, record_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manager", tags=["manager"])


async def get_agent_for(
    db: AsyncSession, actor: User, agent_id: int, action: Action
) -> User:
    agent = await db.get(User, agent_id)
    if not agent or agent.role != Role.AGENT.value:
        raise HTTPException(404, "Agent not found")
    ensure_allowed(actor, action, agent)
    return agent


@router.get("/team", response_model=List[TeamMember])
async def get_team(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    query = select(User).where(User.role == Role.AGENT.value).order_by(User.full_name, User.id)
    if not is_admin(current_user):
        query = query.where(User.manager_id == current_user.id)

    result = await db.execute(query)
    agents = [a for a in result.scalars().all() if is_allowed(current_user, Action.VIEW_AGENT, a)]
    summaries = await coaching.rating_summaries(db, [a.id for a in agents])
    return [
        TeamMember(
            id=agent.id,
            full_name=agent.full_name,
            email=agent.email,
            campaign_id=agent.campaign_id,
            **summaries[agent.id]
        )
        for agent in agents
    ]


@router.get("/agents/{agent_id}/scoring-form", response_model=ScoringFormResponse)
async def get_scoring_form(
    agent_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    agent = await get_agent_for(db, current_user, agent_id, Action.SCORE_AGENT)
    try:
        kpis = await get_enabled_kpis(db, agent.campaign_id)
    except CatalogUnavailableError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, e.message)

    return ScoringFormResponse(
        agent_id=agent.id,
        agent_name=agent.full_name,
        agent_email=agent.email,
        campaign_id=agent.campaign_id,
        kpis=[KpiResponse.model_validate(k) for k in kpis]
    )


@router.post("/agents/{agent_id}/scores/preview", response_model=ScorePreviewResponse)
async def preview_scores(
    agent_id: int,
    preview_in: ScorePreviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    agent = await get_agent_for(db, current_user, agent_id, Action.SCORE_AGENT)
    try:
        rating = await preview_rating(db, agent, preview_in.scores)
    except CatalogUnavailableError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, e.message)
    except ScoringValidationError as e:
        raise HTTPException(400, e.message)
    return ScorePreviewResponse(overall_rating=rating)


@router.post(
    "/agents/{agent_id}/scores",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED
)
async def submit_scores(
    agent_id: int,
    submission: ScoreSubmission,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    agent = await get_agent_for(db, current_user, agent_id, Action.SCORE_AGENT)
    try:
        recorded = await record_submission(
            db,
            agent=agent,
            coach=current_user,
            inputs=submission.scores,
            action_plan=submission.action_plan,
            idempotency_key=submission.idempotency_key
        )
    except ScoringValidationError as e:
        logger.info("Rejected submission for agent %s: %s", agent_id, e.message)
        raise HTTPException(400, e.message)
    except CatalogUnavailableError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, e.message)
    except SubmissionPersistenceError as e:
        raise HTTPException(500, f"Submission failed: {e.message}")

    log = await coaching.coaching_log_response(db, recorded.coaching_log, recorded.scores)
    return SubmissionResponse(
        message=f"Scores and Coaching Log saved successfully! Overall Score: {recorded.overall_rating:.2f}",
        overall_rating=recorded.overall_rating,
        duplicate=recorded.duplicate,
        coaching_log=log
    )


@router.get("/agents/{agent_id}/coaching-logs", response_model=List[CoachingLogResponse])
async def get_agent_coaching_logs(
    agent_id: int,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    await get_agent_for(db, current_user, agent_id, Action.VIEW_AGENT)
    return await coaching.list_coaching_logs(db, agent_id)
