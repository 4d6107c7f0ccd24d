# teams/state_machine.py
"""
Join request and team state machines.

Join request:
    pending → accepted
            → declined
            → cancelled

Team:
    active → deleted

Every other transition is rejected. Terminal states are never re-opened.
"""
from typing import Tuple
import logging

from django.utils import timezone

from .exceptions import RequestNotPending
from .models import Team, TeamJoinRequest

logger = logging.getLogger('teamforge.teams')


# Valid state transitions: from_status -> list of allowed to_statuses
REQUEST_TRANSITIONS = {
    TeamJoinRequest.STATUS_PENDING: [
        TeamJoinRequest.STATUS_ACCEPTED,
        TeamJoinRequest.STATUS_DECLINED,
        TeamJoinRequest.STATUS_CANCELLED,
    ],
}

TEAM_TRANSITIONS = {
    Team.STATUS_ACTIVE: [Team.STATUS_DELETED],
}


def can_transition(join_request: TeamJoinRequest, new_status: str) -> Tuple[bool, str]:
    """
    Check if a join request can transition to a new status.

    Returns (can_transition: bool, reason: str)
    """
    current_status = join_request.status

    if new_status not in dict(TeamJoinRequest.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    allowed = REQUEST_TRANSITIONS.get(current_status, [])

    if new_status not in allowed:
        return False, f"Cannot transition from '{current_status}' to '{new_status}'"

    return True, ""


def transition(join_request: TeamJoinRequest, new_status: str, actor=None, save: bool = True) -> TeamJoinRequest:
    """
    Move a join request to a new status, stamping who decided and when.

    Raises RequestNotPending when the move is not allowed.
    """
    can, reason = can_transition(join_request, new_status)

    if not can:
        logger.warning(
            f"Invalid join request transition attempted: request={join_request.id}, "
            f"from={join_request.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        raise RequestNotPending()

    old_status = join_request.status
    join_request.status = new_status
    join_request.decided_at = timezone.now()
    join_request.decided_by = actor

    if save:
        join_request.save(update_fields=['status', 'decided_at', 'decided_by'])

    logger.info(
        f"Join request transition: request={join_request.id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )

    return join_request


def is_terminal_status(status: str) -> bool:
    """
    Check if a join request status is terminal (no further transitions).
    """
    return not REQUEST_TRANSITIONS.get(status)


def mark_team_deleted(team: Team, actor=None) -> Team:
    if Team.STATUS_DELETED not in TEAM_TRANSITIONS.get(team.status, []):
        raise ValueError(f"Cannot delete team {team.id} in status '{team.status}'")

    team.status = Team.STATUS_DELETED
    team.deleted_at = timezone.now()
    team.save(update_fields=['status', 'deleted_at'])

    logger.info(f"Team transition: team={team.id}, from=active, to=deleted, actor={getattr(actor, 'id', 'unknown')}")
    return team
