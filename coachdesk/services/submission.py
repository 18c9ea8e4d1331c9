"""Scoring submissions: validation, rating and the coaching-log write.

A submission is one coaching session for one agent. It is recorded as a
single ``CoachingLog`` row plus one ``AgentScore`` row per KPI that was given
a raw score, all inside one transaction: either every row lands or none do.
The overall rating is always computed here from the submitted inputs, never
taken from the client.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from coachdesk.config import settings
from coachdesk.models.campaign import Kpi
from coachdesk.models.coaching import CoachingLog, AgentScore
from coachdesk.models.user import User
from coachdesk.schemas.scoring import KpiScoreInput
from coachdesk.services.errors import ScoringValidationError, SubmissionPersistenceError
from coachdesk.services.kpi_catalog import get_enabled_kpis
from coachdesk.services.scoring import (
    ScoringEntry,
    TARGET_BASED_TYPES,
    compute_overall_rating,
    parse_kpi_type,
)

logger = logging.getLogger(__name__)

DEFAULT_COACH_NAME = "Manager"


@dataclass
class RecordedSubmission:
    coaching_log: CoachingLog
    scores: List[AgentScore] = field(default_factory=list)
    duplicate: bool = False

    @property
    def overall_rating(self) -> float:
        return self.coaching_log.overall_rating


def match_inputs(kpis: Sequence[Kpi], inputs: Sequence[KpiScoreInput]) -> List[Tuple[Kpi, KpiScoreInput]]:
    """Pair each input with its enabled KPI definition.

    Rejects inputs for KPIs outside the enabled set and KPIs given twice.
    """
    enabled = {kpi.id: kpi for kpi in kpis}
    seen = set()
    pairs = []
    for item in inputs:
        kpi = enabled.get(item.kpi_id)
        if kpi is None:
            raise ScoringValidationError(
                f"KPI {item.kpi_id} is not enabled for this agent's campaign."
            )
        if item.kpi_id in seen:
            raise ScoringValidationError(f"KPI '{kpi.name}' was submitted more than once.")
        seen.add(item.kpi_id)
        pairs.append((kpi, item))
    return pairs


def check_complete(pairs: Sequence[Tuple[Kpi, KpiScoreInput]]) -> None:
    """Every weighted KPI needs a score, and a target when it is target-based."""
    if not any(item.weight > 0 for _, item in pairs):
        raise ScoringValidationError("Please set weight for at least one KPI.")

    for kpi, item in pairs:
        if item.weight <= 0:
            continue
        if item.raw_score is None:
            raise ScoringValidationError(f"Score is required for KPI '{kpi.name}'.")
        if parse_kpi_type(kpi.kpi_type) in TARGET_BASED_TYPES and item.target is None:
            raise ScoringValidationError(f"Target is required for KPI '{kpi.name}'.")


def entries_for(pairs: Sequence[Tuple[Kpi, KpiScoreInput]]) -> List[ScoringEntry]:
    return [
        ScoringEntry(
            kpi_type=kpi.kpi_type,
            raw_score=item.raw_score,
            target=item.target,
            weight=item.weight,
        )
        for kpi, item in pairs
    ]


async def preview_rating(db: AsyncSession, agent: User, inputs: Sequence[KpiScoreInput]) -> Optional[float]:
    """Rating the given inputs would produce, without writing anything."""
    kpis = await get_enabled_kpis(db, agent.campaign_id)
    pairs = match_inputs(kpis, inputs)
    return compute_overall_rating(entries_for(pairs))


async def _find_by_key(db: AsyncSession, idempotency_key: str) -> Optional[RecordedSubmission]:
    result = await db.execute(
        select(CoachingLog).where(CoachingLog.idempotency_key == idempotency_key)
    )
    log = result.scalar_one_or_none()
    if log is None:
        return None
    scores = await db.execute(
        select(AgentScore)
        .where(AgentScore.coaching_log_id == log.id)
        .order_by(AgentScore.id)
    )
    return RecordedSubmission(coaching_log=log, scores=list(scores.scalars().all()), duplicate=True)


async def _replay(db: AsyncSession, agent_id: int, idempotency_key: str) -> Optional[RecordedSubmission]:
    existing = await _find_by_key(db, idempotency_key)
    if existing and existing.coaching_log.agent_id != agent_id:
        raise ScoringValidationError("This idempotency key was already used for another agent.")
    return existing


async def record_submission(
    db: AsyncSession,
    agent: User,
    coach: User,
    inputs: Sequence[KpiScoreInput],
    action_plan: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> RecordedSubmission:
    # A rollback expires every loaded instance, so keep plain ids
    agent_id, coach_id, campaign_id = agent.id, coach.id, agent.campaign_id

    if idempotency_key:
        existing = await _replay(db, agent_id, idempotency_key)
        if existing:
            logger.info("Replayed submission %s for key %s", existing.coaching_log.id, idempotency_key)
            return existing

    kpis = await get_enabled_kpis(db, campaign_id)
    pairs = match_inputs(kpis, inputs)
    check_complete(pairs)

    rating = compute_overall_rating(entries_for(pairs))
    if rating is None:
        raise ScoringValidationError("Please set weight for at least one KPI.")

    now = datetime.now(timezone.utc)
    log = CoachingLog(
        agent_id=agent_id,
        coach_id=coach_id,
        coach_name=coach.full_name or DEFAULT_COACH_NAME,
        campaign_id=campaign_id,
        action_plan=(action_plan or "").strip() or settings.DEFAULT_ACTION_PLAN,
        overall_rating=rating,
        idempotency_key=idempotency_key,
        created_at=now,
    )

    try:
        db.add(log)
        await db.flush()

        scores = [
            AgentScore(
                coaching_log_id=log.id,
                agent_id=agent_id,
                kpi_id=kpi.id,
                campaign_id=campaign_id,
                score=item.raw_score,
                target=item.target or 0.0,
                weight=item.weight,
                created_at=now,
            )
            for kpi, item in pairs
            if item.raw_score is not None
        ]
        db.add_all(scores)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        # Lost a race against a submission carrying the same key
        if idempotency_key:
            existing = await _replay(db, agent_id, idempotency_key)
            if existing:
                return existing
        msg = str(getattr(e, "orig", e))
        logger.error("Submission for agent %s by coach %s failed: %s", agent_id, coach_id, msg)
        raise SubmissionPersistenceError(msg) from e
    except SQLAlchemyError as e:
        await db.rollback()
        msg = str(getattr(e, "orig", e))
        logger.error("Submission for agent %s by coach %s failed: %s", agent_id, coach_id, msg)
        raise SubmissionPersistenceError(msg) from e

    logger.info(
        "Recorded coaching log %s for agent %s by coach %s: rating %.2f, %d KPI scores",
        log.id, agent_id, coach_id, rating, len(scores),
    )
    return RecordedSubmission(coaching_log=log, scores=scores)
