"""Tests for the agent's own performance views."""

import pytest
from conftest import auth_headers

from coachdesk.models.user import Role


async def submit(client, manager, agent, scores, action_plan=None):
    response = await client.post(
        f"/manager/agents/{agent.id}/scores",
        json={"scores": scores, "action_plan": action_plan},
        headers=auth_headers(manager),
    )
    assert response.status_code == 201
    return response.json()


async def test_dashboard_without_sessions(client, agent, campaign):
    response = await client.get("/agent/dashboard", headers=auth_headers(agent))

    assert response.status_code == 200
    data = response.json()
    assert data["full_name"] == "Alex Agent"
    assert data["campaign_name"] == "Billing Support"
    assert data["coaching_sessions"] == 0
    assert data["latest_rating"] is None
    assert data["average_rating"] is None


async def test_agent_sees_own_history(client, manager, agent, kpis):
    await submit(
        client, manager, agent,
        [
            {"kpi_id": kpis["csat"].id, "raw_score": 90, "target": 90, "weight": 50},
            {"kpi_id": kpis["revenue"].id, "raw_score": 500, "target": 1000, "weight": 50},
        ],
        action_plan="Offer the annual plan on every eligible call.",
    )

    dashboard = (await client.get("/agent/dashboard", headers=auth_headers(agent))).json()
    assert dashboard["coaching_sessions"] == 1
    assert dashboard["latest_rating"] == pytest.approx(4.0)

    logs = (await client.get("/agent/coaching-logs", headers=auth_headers(agent))).json()
    assert len(logs) == 1
    assert logs[0]["coach_name"] == "Morgan Lead"
    assert logs[0]["action_plan"] == "Offer the annual plan on every eligible call."

    scores = (await client.get("/agent/scores", headers=auth_headers(agent))).json()
    assert {s["kpi_name"]: s["score"] for s in scores} == {"CSAT": 90, "Upsell Revenue": 500}


async def test_agent_does_not_see_other_agents(client, manager, agent, make_user, campaign, kpis):
    teammate = await make_user(Role.AGENT, manager_id=manager.id, campaign_id=campaign.id)
    await submit(
        client, manager, teammate,
        [{"kpi_id": kpis["csat"].id, "raw_score": 90, "target": 90, "weight": 100}],
    )

    logs = (await client.get("/agent/coaching-logs", headers=auth_headers(agent))).json()
    assert logs == []

    response = await client.get(
        f"/manager/agents/{teammate.id}/coaching-logs", headers=auth_headers(agent)
    )
    assert response.status_code == 403


async def test_managers_have_no_agent_workspace(client, manager):
    response = await client.get("/agent/dashboard", headers=auth_headers(manager))
    assert response.status_code == 403


async def test_unassigned_users_are_restricted(client, make_user):
    pending = await make_user(Role.UNASSIGNED)

    headers = auth_headers(pending)
    assert (await client.get("/agent/dashboard", headers=headers)).status_code == 403
    assert (await client.get("/admin/users", headers=headers)).status_code == 403
    assert (await client.get("/manager/team", headers=headers)).json() == []
