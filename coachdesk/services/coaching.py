# coachdesk/services/coaching.py
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from coachdesk.models.campaign import Kpi
from coachdesk.models.coaching import CoachingLog, AgentScore
from coachdesk.schemas.scoring import AgentScoreResponse, CoachingLogResponse
from coachdesk.services.scoring import round_half_up


async def _kpi_names(db: AsyncSession, kpi_ids) -> Dict[int, str]:
    ids = set(kpi_ids)
    if not ids:
        return {}
    result = await db.execute(select(Kpi.id, Kpi.name).where(Kpi.id.in_(ids)))
    return {row.id: row.name for row in result.fetchall()}


def _score_response(score: AgentScore, names: Dict[int, str]) -> AgentScoreResponse:
    resp = AgentScoreResponse.model_validate(score)
    resp.kpi_name = names.get(score.kpi_id)
    return resp


def _log_response(log: CoachingLog, scores: List[AgentScore], names: Dict[int, str]) -> CoachingLogResponse:
    resp = CoachingLogResponse.model_validate(log)
    resp.scores = [_score_response(s, names) for s in scores]
    return resp


async def score_responses(db: AsyncSession, scores: List[AgentScore]) -> List[AgentScoreResponse]:
    names = await _kpi_names(db, [s.kpi_id for s in scores])
    return [_score_response(s, names) for s in scores]


async def coaching_log_response(
    db: AsyncSession, log: CoachingLog, scores: Optional[List[AgentScore]] = None
) -> CoachingLogResponse:
    if scores is None:
        result = await db.execute(
            select(AgentScore)
            .where(AgentScore.coaching_log_id == log.id)
            .order_by(AgentScore.id)
        )
        scores = list(result.scalars().all())

    names = await _kpi_names(db, [s.kpi_id for s in scores])
    return _log_response(log, scores, names)


async def list_coaching_logs(db: AsyncSession, agent_id: int) -> List[CoachingLogResponse]:
    """An agent's coaching history, newest first, each with its score records.

    Runs three queries however long the history is: logs, their scores, and
    the names of every KPI those scores refer to.
    """
    result = await db.execute(
        select(CoachingLog)
        .where(CoachingLog.agent_id == agent_id)
        .order_by(CoachingLog.created_at.desc(), CoachingLog.id.desc())
    )
    logs = result.scalars().all()
    if not logs:
        return []

    score_result = await db.execute(
        select(AgentScore)
        .where(AgentScore.coaching_log_id.in_([log.id for log in logs]))
        .order_by(AgentScore.id)
    )
    scores = list(score_result.scalars().all())
    by_log: Dict[int, List[AgentScore]] = {log.id: [] for log in logs}
    for score in scores:
        by_log[score.coaching_log_id].append(score)

    names = await _kpi_names(db, [s.kpi_id for s in scores])
    return [_log_response(log, by_log[log.id], names) for log in logs]


async def list_agent_scores(db: AsyncSession, agent_id: int) -> List[AgentScoreResponse]:
    result = await db.execute(
        select(AgentScore)
        .where(AgentScore.agent_id == agent_id)
        .order_by(AgentScore.created_at.desc(), AgentScore.id.desc())
    )
    return await score_responses(db, list(result.scalars().all()))


def _empty_summary() -> dict:
    return {"coaching_sessions": 0, "latest_rating": None, "average_rating": None}


async def rating_summaries(db: AsyncSession, agent_ids: Iterable[int]) -> Dict[int, dict]:
    """Session count, latest and average overall rating for each agent, in two queries."""
    ids = list(agent_ids)
    summaries = {agent_id: _empty_summary() for agent_id in ids}
    if not ids:
        return summaries

    totals = await db.execute(
        select(CoachingLog.agent_id, func.count(CoachingLog.id), func.avg(CoachingLog.overall_rating))
        .where(CoachingLog.agent_id.in_(ids))
        .group_by(CoachingLog.agent_id)
    )
    for agent_id, count, average in totals.all():
        summaries[agent_id]["coaching_sessions"] = count
        summaries[agent_id]["average_rating"] = round_half_up(float(average)) if average is not None else None

    # Latest first, so the first rating seen per agent wins
    latest = await db.execute(
        select(CoachingLog.agent_id, CoachingLog.overall_rating)
        .where(CoachingLog.agent_id.in_(ids))
        .order_by(CoachingLog.agent_id, CoachingLog.created_at.desc(), CoachingLog.id.desc())
    )
    seen = set()
    for agent_id, rating in latest.all():
        if agent_id not in seen:
            seen.add(agent_id)
            summaries[agent_id]["latest_rating"] = rating

    return summaries


async def rating_summary(db: AsyncSession, agent_id: int) -> dict:
    summaries = await rating_summaries(db, [agent_id])
    return summaries[agent_id]
