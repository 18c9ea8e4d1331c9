from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from coachdesk.database import get_db
from coachdesk.core.auth import get_current_user, ensure_allowed
from coachdesk.core.policy import Action
from coachdesk.models.campaign import Campaign
from coachdesk.schemas.dashboard import AgentDashboardResponse
from coachdesk.schemas.scoring import CoachingLogResponse, AgentScoreResponse
from coachdesk.services import coaching

router = APIRouter(prefix="/agent", tags=["agent"])


@router.get("/dashboard", response_model=AgentDashboardResponse)
async def get_agent_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.VIEW_AGENT, current_user)

    campaign = None
    if current_user.campaign_id is not None:
        campaign = await db.get(Campaign, current_user.campaign_id)
    summary = await coaching.rating_summary(db, current_user.id)

    return AgentDashboardResponse(
        full_name=current_user.full_name,
        email=current_user.email,
        campaign_id=current_user.campaign_id,
        campaign_name=campaign.name if campaign else None,
        **summary
    )


@router.get("/coaching-logs", response_model=List[CoachingLogResponse])
async def get_my_coaching_logs(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.VIEW_AGENT, current_user)
    return await coaching.list_coaching_logs(db, current_user.id)


@router.get("/scores", response_model=List[AgentScoreResponse])
async def get_my_scores(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    ensure_allowed(current_user, Action.VIEW_AGENT, current_user)
    return await coaching.list_agent_scores(db, current_user.id)
