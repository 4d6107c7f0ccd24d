# teams/arbiter.py
"""
Join-Request Arbiter.

Every join, accept, decline and withdrawal passes through here. Each call is
one transaction that locks the team row first and the request row second,
always in that order, so:

- two accepts on the same team cannot both pass the capacity recount,
- a requester can never end up on two teams in one event,
- a requester has at most one pending request per event,
- decided requests are never re-opened.
"""
import logging

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from core.constants import (
    ACTIVITY_REQUEST_ACCEPTED,
    ACTIVITY_REQUEST_CANCELLED,
    ACTIVITY_REQUEST_CREATED,
    ACTIVITY_REQUEST_DECLINED,
)
from core.identity import require_user
from core.services import ActivityService

from . import state_machine
from .exceptions import (
    AlreadyOnTeam,
    AlreadyPending,
    JoinRequestNotFound,
    NotOwner,
    RequestNotPending,
    TeamFull,
)
from .models import TeamJoinRequest
from .policies import ensure_team_leader
from .retry import retry_on_conflict
from .store import add_member, has_membership, has_room, lock_team, remove_member

logger = logging.getLogger('teamforge.teams')

ACTION_ACCEPT = "accept"
ACTION_DECLINE = "decline"
ACTIONS = (ACTION_ACCEPT, ACTION_DECLINE)


def _has_pending_request(user, event_id) -> bool:
    return TeamJoinRequest.objects.filter(
        event_id=event_id,
        requester=user,
        status=TeamJoinRequest.STATUS_PENDING,
    ).exists()


@retry_on_conflict
def request_to_join(team_id, requester, preferred_role=None) -> TeamJoinRequest:
    """
    Create a pending join request.

    The capacity check here only spares the requester an obviously futile
    request; capacity is enforced again when the leader accepts.
    """
    require_user(requester)

    with transaction.atomic():
        team = lock_team(team_id)

        if has_membership(requester, team.event_id):
            raise AlreadyOnTeam()

        if _has_pending_request(requester, team.event_id):
            raise AlreadyPending()

        if not has_room(team):
            raise TeamFull()

        try:
            with transaction.atomic():
                join_request = TeamJoinRequest.objects.create(
                    team=team,
                    event_id=team.event_id,
                    requester=requester,
                    preferred_role=preferred_role or None,
                )
        except IntegrityError:
            # Another request by the same user for this event committed first
            raise AlreadyPending()

        ActivityService.log_activity(
            actor=requester,
            verb=ACTIVITY_REQUEST_CREATED,
            target=join_request,
            event=team.event,
            metadata={'team_id': team.id, 'team_name': team.name, 'preferred_role': join_request.preferred_role},
        )

    logger.info(f"Join request created: request={join_request.id}, team={team.id}, requester={requester.pk}")
    return join_request


def respond_to_request(request_id, deciding_user, action) -> TeamJoinRequest:
    """
    Leader decision on a pending request.

    decline: request -> declined.
    accept:  one transaction that recounts capacity, re-checks the requester's
             memberships, adds the member and marks the request accepted.
             A full team leaves the request pending. A requester who already
             joined another team gets the request declined, and the caller
             receives AlreadyOnTeam.
    """
    require_user(deciding_user)

    action = (action or "").strip().lower()
    if action not in ACTIONS:
        raise ValidationError({'action': f"Invalid action. Valid actions: {', '.join(ACTIONS)}"})

    join_request, error = _decide(request_id, deciding_user, action)
    if error is not None:
        raise error
    return join_request


@retry_on_conflict
def _decide(request_id, deciding_user, action):
    """
    Returns (join_request, error). Errors whose side effects must persist
    (auto-decline) are returned rather than raised, so the transaction commits.
    """
    with transaction.atomic():
        team_id = (
            TeamJoinRequest.objects
            .filter(pk=request_id)
            .values_list('team_id', flat=True)
            .first()
        )
        if team_id is None:
            raise JoinRequestNotFound()

        team = lock_team(team_id, active_only=False)
        ensure_team_leader(deciding_user, team)

        join_request = TeamJoinRequest.objects.select_for_update().get(pk=request_id)
        if not join_request.is_pending:
            raise RequestNotPending()

        if action == ACTION_DECLINE:
            state_machine.transition(join_request, TeamJoinRequest.STATUS_DECLINED, actor=deciding_user)
            ActivityService.log_activity(
                actor=deciding_user,
                verb=ACTIVITY_REQUEST_DECLINED,
                target=join_request,
                event=team.event,
                metadata={'team_id': team.id, 'requester_id': join_request.requester_id},
            )
            return join_request, None

        if not has_room(team):
            logger.warning(f"Accept rejected, team full: request={join_request.id}, team={team.id}")
            raise TeamFull("This team is full. Decline the request or free a slot first.")

        requester = join_request.requester
        try:
            add_member(team, requester, role=join_request.preferred_role)
        except AlreadyOnTeam:
            state_machine.transition(join_request, TeamJoinRequest.STATUS_DECLINED, actor=deciding_user)
            ActivityService.log_activity(
                actor=deciding_user,
                verb=ACTIVITY_REQUEST_DECLINED,
                target=join_request,
                event=team.event,
                metadata={'team_id': team.id, 'requester_id': requester.pk, 'reason': 'already on a team'},
            )
            logger.warning(
                f"Accept turned into decline, requester already on a team: "
                f"request={join_request.id}, requester={requester.pk}, event={team.event_id}"
            )
            return join_request, AlreadyOnTeam("User already part of another team; the request was declined.")

        state_machine.transition(join_request, TeamJoinRequest.STATUS_ACCEPTED, actor=deciding_user)

        # At most one pending request per event means this is normally empty
        leftovers = (
            TeamJoinRequest.objects.select_for_update()
            .filter(
                event_id=join_request.event_id,
                requester_id=join_request.requester_id,
                status=TeamJoinRequest.STATUS_PENDING,
            )
            .exclude(pk=join_request.pk)
        )
        for other in leftovers:
            state_machine.transition(other, TeamJoinRequest.STATUS_DECLINED, actor=deciding_user)

        ActivityService.log_activity(
            actor=deciding_user,
            verb=ACTIVITY_REQUEST_ACCEPTED,
            target=join_request,
            event=team.event,
            metadata={'team_id': team.id, 'requester_id': requester.pk},
        )

    return join_request, None


@retry_on_conflict
def cancel_own_request(request_id, requester) -> TeamJoinRequest:
    """
    Requester withdraws a pending request, freeing them to ask elsewhere.
    """
    require_user(requester)

    with transaction.atomic():
        try:
            join_request = TeamJoinRequest.objects.select_for_update().get(pk=request_id)
        except TeamJoinRequest.DoesNotExist:
            raise JoinRequestNotFound()

        if join_request.requester_id != requester.pk:
            raise NotOwner()

        if not join_request.is_pending:
            raise RequestNotPending()

        state_machine.transition(join_request, TeamJoinRequest.STATUS_CANCELLED, actor=requester)
        ActivityService.log_activity(
            actor=requester,
            verb=ACTIVITY_REQUEST_CANCELLED,
            target=join_request,
            event=join_request.event,
            metadata={'team_id': join_request.team_id},
        )

    return join_request


def leave_team(team_id, user) -> None:
    remove_member(team_id, user)
