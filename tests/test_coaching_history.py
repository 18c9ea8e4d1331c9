"""Tests for the coaching history and rating summary read models."""

from contextlib import contextmanager

import pytest
from sqlalchemy import event

from coachdesk.models.user import Role
from coachdesk.schemas.scoring import KpiScoreInput
from coachdesk.services.coaching import list_coaching_logs, rating_summaries, rating_summary
from coachdesk.services.submission import record_submission


@contextmanager
def count_queries(engine):
    statements = []

    def before_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", before_execute)
    try:
        yield statements
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", before_execute)


async def submit(db, agent, manager, kpis, csat):
    inputs = [
        KpiScoreInput(kpi_id=kpis["csat"].id, raw_score=csat, target=90, weight=60),
        KpiScoreInput(kpi_id=kpis["quality"].id, raw_score=4, weight=20),
        KpiScoreInput(kpi_id=kpis["revenue"].id, raw_score=800, target=1000, weight=20),
    ]
    return await record_submission(db, agent, manager, inputs)


async def test_history_query_count_does_not_grow_with_logs(engine, db_session, agent, manager, kpis):
    for csat in (60, 75, 90, 45):
        await submit(db_session, agent, manager, kpis, csat)

    with count_queries(engine) as statements:
        logs = await list_coaching_logs(db_session, agent.id)

    assert len(logs) == 4
    assert all({s.kpi_name for s in log.scores} == {"CSAT", "Quality", "Upsell Revenue"} for log in logs)
    assert len(statements) == 3


async def test_summaries_for_whole_team(engine, db_session, make_user, agent, manager, campaign, kpis):
    quiet = await make_user(Role.AGENT, manager_id=manager.id, campaign_id=campaign.id)
    first = await submit(db_session, agent, manager, kpis, 90)
    second = await submit(db_session, agent, manager, kpis, 45)

    with count_queries(engine) as statements:
        summaries = await rating_summaries(db_session, [agent.id, quiet.id])

    assert len(statements) == 2
    assert summaries[quiet.id] == {"coaching_sessions": 0, "latest_rating": None, "average_rating": None}
    assert summaries[agent.id]["coaching_sessions"] == 2
    assert summaries[agent.id]["latest_rating"] == second.overall_rating
    assert summaries[agent.id]["average_rating"] == pytest.approx(
        (first.overall_rating + second.overall_rating) / 2, abs=0.005
    )


async def test_single_agent_summary(db_session, agent, manager, kpis):
    recorded = await submit(db_session, agent, manager, kpis, 90)

    summary = await rating_summary(db_session, agent.id)

    assert summary["coaching_sessions"] == 1
    assert summary["latest_rating"] == recorded.overall_rating
