"""Tests for the authorization policy."""

from types import SimpleNamespace

import pytest

from coachdesk.core.policy import Action, is_admin, is_allowed
from coachdesk.models.user import Role


def user(role: Role, id: int, manager_id=None, is_active=True):
    return SimpleNamespace(id=id, role=role.value, manager_id=manager_id, is_active=is_active)


SUPER = user(Role.SUPER_ADMIN, 1)
ADMIN = user(Role.ADMIN, 2)
MANAGER = user(Role.MANAGER, 3)
OTHER_MANAGER = user(Role.MANAGER, 4)
AGENT = user(Role.AGENT, 5, manager_id=3)
OTHER_AGENT = user(Role.AGENT, 6, manager_id=4)
UNASSIGNED = user(Role.UNASSIGNED, 7)


@pytest.mark.parametrize("action", list(Action))
def test_super_admin_may_do_everything(action):
    assert is_allowed(SUPER, action, AGENT)
    assert is_allowed(SUPER, action, SUPER)


def test_admin_administers_but_cannot_touch_super_admins():
    assert is_allowed(ADMIN, Action.ADMINISTER)
    assert is_allowed(ADMIN, Action.MANAGE_USER, MANAGER)
    assert is_allowed(ADMIN, Action.MANAGE_USER, user(Role.ADMIN, 99))
    assert not is_allowed(ADMIN, Action.MANAGE_USER, SUPER)


def test_admin_may_score_and_view_any_agent():
    assert is_allowed(ADMIN, Action.SCORE_AGENT, OTHER_AGENT)
    assert is_allowed(ADMIN, Action.VIEW_AGENT, AGENT)
    assert not is_allowed(ADMIN, Action.SCORE_AGENT, MANAGER)


def test_manager_limited_to_own_team():
    assert is_allowed(MANAGER, Action.SCORE_AGENT, AGENT)
    assert is_allowed(MANAGER, Action.VIEW_AGENT, AGENT)
    assert not is_allowed(MANAGER, Action.SCORE_AGENT, OTHER_AGENT)
    assert not is_allowed(MANAGER, Action.VIEW_AGENT, OTHER_AGENT)
    assert not is_allowed(MANAGER, Action.ADMINISTER)
    assert not is_allowed(MANAGER, Action.MANAGE_USER, AGENT)


def test_agent_sees_only_self():
    assert is_allowed(AGENT, Action.VIEW_AGENT, AGENT)
    assert not is_allowed(AGENT, Action.VIEW_AGENT, OTHER_AGENT)
    assert not is_allowed(AGENT, Action.SCORE_AGENT, AGENT)
    assert not is_allowed(AGENT, Action.ADMINISTER)


@pytest.mark.parametrize("action", list(Action))
def test_unassigned_may_do_nothing(action):
    assert not is_allowed(UNASSIGNED, action, UNASSIGNED)


def test_inactive_users_are_denied():
    inactive = user(Role.SUPER_ADMIN, 8, is_active=False)
    assert not is_allowed(inactive, Action.ADMINISTER)
    assert not is_allowed(None, Action.VIEW_AGENT, AGENT)


def test_is_admin():
    assert is_admin(SUPER)
    assert is_admin(ADMIN)
    assert not is_admin(MANAGER)
    assert not is_admin(None)
