# teams/exceptions.py
"""
Team formation error taxonomy.

Every business-rule failure is an APIException with a stable `code`, so the
service layer can raise it directly and the project exception handler renders
it without any per-view translation.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound

from core.identity import Unauthenticated  # noqa: F401  (re-exported)


class TeamFormationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Team formation rule violated."
    default_code = "team_formation_error"


# Authorization failures: always rejected, never retried

class NotLeader(TeamFormationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Only the team leader can perform this action."
    default_code = "not_leader"


class NotOwner(TeamFormationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Only the requester can withdraw this join request."
    default_code = "not_owner"


# Membership rules

class NotAMember(TeamFormationError):
    default_detail = "You are not a member of this team."
    default_code = "not_a_member"


class LeaderCannotLeave(TeamFormationError):
    default_detail = "Team leaders cannot leave; delete the team instead."
    default_code = "leader_cannot_leave"


class AlreadyOnTeam(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already part of a team in this event."
    default_code = "already_on_team"


class AlreadyPending(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You already have a pending join request in this event."
    default_code = "already_pending"


class TeamFull(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This team is full."
    default_code = "team_full"


class RequestNotPending(TeamFormationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Join request already handled."
    default_code = "request_not_pending"


class TransientConflict(TeamFormationError):
    """Concurrent updates kept colliding; safe to try again."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The team is busy right now. Please try again."
    default_code = "transient_conflict"


# Lookups

class TeamNotFound(NotFound):
    default_detail = "Team not found."
    default_code = "team_not_found"


class JoinRequestNotFound(NotFound):
    default_detail = "Join request not found."
    default_code = "join_request_not_found"


class TeamPrivate(TeamFormationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Team is private."
    default_code = "team_private"
