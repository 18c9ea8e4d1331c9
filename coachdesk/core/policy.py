"""Authorization policy.

Every administrative mutation, every scoring submission and every read of
another user's performance goes through ``is_allowed``; routers do not
compare roles themselves.
"""

from enum import Enum
from typing import Optional
from coachdesk.models.user import ADMIN_ROLES, Role


class Action(str, Enum):
    ADMINISTER = "administer"        # campaigns, KPI catalog, user listing
    MANAGE_USER = "manage_user"      # create or edit the target user
    SCORE_AGENT = "score_agent"      # submit KPI scores / coaching logs for the target agent
    VIEW_AGENT = "view_agent"        # read the target agent's coaching history and scores


def _is_super_admin(user) -> bool:
    return user.role == Role.SUPER_ADMIN.value


def is_allowed(actor, action: Action, target=None) -> bool:
    """Decide whether ``actor`` may perform ``action`` on ``target``.

    ``target`` is a user-like object (``id``, ``role``, ``manager_id``) for
    the user-scoped actions, and is ignored for ``ADMINISTER``.
    """
    if actor is None or not actor.is_active:
        return False

    if _is_super_admin(actor):
        return True

    if actor.role == Role.ADMIN.value:
        if action == Action.MANAGE_USER:
            # Admins cannot create, edit or promote Super Admins
            return target is None or not _is_super_admin(target)
        if action in (Action.SCORE_AGENT, Action.VIEW_AGENT):
            return _is_agent(target)
        return action == Action.ADMINISTER

    if actor.role == Role.MANAGER.value:
        if action in (Action.SCORE_AGENT, Action.VIEW_AGENT):
            return _is_agent(target) and target.manager_id == actor.id
        return False

    if actor.role == Role.AGENT.value:
        return action == Action.VIEW_AGENT and target is not None and target.id == actor.id

    return False


def _is_agent(target) -> bool:
    return target is not None and target.role == Role.AGENT.value


def is_admin(user: Optional[object]) -> bool:
    return user is not None and user.role in ADMIN_ROLES
