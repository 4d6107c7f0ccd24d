# teams/store.py
"""
Team Store: durable, capacity-aware mutation of teams and memberships.

Every read-count-then-write runs inside transaction.atomic() with the team
row locked (select_for_update), so two writers on the same team are
serialized. The one-team-per-user-per-event rule is also a database
constraint, so a writer that loses a cross-team race gets IntegrityError,
reported as AlreadyOnTeam.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction

from core.constants import (
    ACTIVITY_MEMBER_JOINED,
    ACTIVITY_MEMBER_LEFT,
    ACTIVITY_REQUEST_CANCELLED,
    ACTIVITY_TEAM_CREATED,
    ACTIVITY_TEAM_DELETED,
    ACTIVITY_TEAM_UPDATED,
)
from core.identity import require_user
from core.services import ActivityService
from events.catalog import get_event, get_event_capacity

from . import state_machine
from .exceptions import AlreadyOnTeam, LeaderCannotLeave, NotAMember, TeamFull, TeamNotFound
from .models import Team, TeamJoinRequest, TeamMember
from .policies import ensure_team_leader, ensure_team_member
from .retry import retry_on_conflict

logger = logging.getLogger('teamforge.teams')

PROFILE_FIELDS = (
    'name',
    'bio',
    'roles_required',
    'project_name',
    'problem_statement',
    'project_link',
    'is_public',
)


def leader_role() -> str:
    return settings.TEAM_FORMATION.get("ROLE_LEADER", "Leader")


def default_member_role() -> str:
    return settings.TEAM_FORMATION.get("DEFAULT_MEMBER_ROLE", "Member")


def lock_team(team_id, active_only: bool = True) -> Team:
    """
    Fetch a team with its row locked until the surrounding transaction ends.
    Must be called inside transaction.atomic().
    """
    queryset = Team.objects.select_for_update()
    if active_only:
        queryset = queryset.filter(status=Team.STATUS_ACTIVE)
    try:
        return queryset.get(pk=team_id)
    except Team.DoesNotExist:
        raise TeamNotFound()


def has_membership(user, event_id) -> bool:
    return TeamMember.objects.filter(event_id=event_id, user=user).exists()


def member_count(team: Team) -> int:
    return TeamMember.objects.filter(team=team).count()


def has_room(team: Team) -> bool:
    """Recount members against the event capacity. Call with the team locked."""
    capacity = get_event_capacity(team.event_id)
    return capacity is None or member_count(team) < capacity


@retry_on_conflict
def create_team(event_id, leader, name, bio="", roles_required=None, **profile) -> Team:
    """
    Create a team led by `leader`, who becomes its first member.

    Any pending join requests the leader had elsewhere in the event are
    withdrawn, since the leader now holds a membership there.
    """
    require_user(leader)
    event = get_event(event_id)
    extra = {key: value for key, value in profile.items() if key in PROFILE_FIELDS}

    with transaction.atomic():
        if has_membership(leader, event.id):
            raise AlreadyOnTeam()

        # The leader takes the first slot
        capacity = get_event_capacity(event.id)
        if capacity is not None and capacity < 1:
            raise TeamFull()

        # Request rows are locked before the membership insert, the same order accept uses
        withdrawn = list(
            TeamJoinRequest.objects.select_for_update().filter(
                event=event,
                requester=leader,
                status=TeamJoinRequest.STATUS_PENDING,
            )
        )

        team = Team.objects.create(
            event=event,
            leader=leader,
            name=name,
            bio=bio or "",
            roles_required=list(roles_required or []),
            **extra,
        )

        try:
            with transaction.atomic():
                TeamMember.objects.create(team=team, event=event, user=leader, role=leader_role())
        except IntegrityError:
            # Lost a race against another create/accept for the same user
            raise AlreadyOnTeam()

        for join_request in withdrawn:
            state_machine.transition(join_request, TeamJoinRequest.STATUS_CANCELLED, actor=leader)
            ActivityService.log_activity(
                actor=leader,
                verb=ACTIVITY_REQUEST_CANCELLED,
                target=join_request,
                event=event,
                metadata={'team_id': join_request.team_id, 'reason': 'requester created a team'},
            )

        ActivityService.log_activity(
            actor=leader,
            verb=ACTIVITY_TEAM_CREATED,
            target=team,
            event=event,
            metadata={'team_name': team.name, 'event_title': event.title},
        )

    logger.info(f"Team created: team={team.id}, event={event.id}, leader={leader.pk}")
    return team


def add_member(team: Team, user, role=None) -> TeamMember:
    """
    Add `user` to `team`.

    Part of the caller's transaction: the team row must already be locked
    (see lock_team) so the capacity recount and the insert cannot interleave
    with another writer on the same team.
    """
    if not has_room(team):
        raise TeamFull()

    if has_membership(user, team.event_id):
        raise AlreadyOnTeam()

    try:
        with transaction.atomic():
            member = TeamMember.objects.create(
                team=team,
                event_id=team.event_id,
                user=user,
                role=role or default_member_role(),
            )
    except IntegrityError:
        raise AlreadyOnTeam()

    ActivityService.log_activity(
        actor=user,
        verb=ACTIVITY_MEMBER_JOINED,
        target=team,
        event=team.event,
        metadata={'team_name': team.name, 'role': member.role},
    )

    logger.info(f"Member added: team={team.id}, user={user.pk}, role={member.role}")
    return member


@retry_on_conflict
def remove_member(team_id, user) -> None:
    require_user(user)

    with transaction.atomic():
        team = lock_team(team_id)

        member = TeamMember.objects.filter(team=team, user=user).first()
        if member is None:
            raise NotAMember()

        if team.leader_id == user.pk:
            raise LeaderCannotLeave()

        member.delete()

        ActivityService.log_activity(
            actor=user,
            verb=ACTIVITY_MEMBER_LEFT,
            target=team,
            event=team.event,
            metadata={'team_name': team.name},
        )

    logger.info(f"Member left: team={team_id}, user={user.pk}")


@retry_on_conflict
def delete_team(team_id, requesting_user) -> Team:
    """
    Leader-only. Pending join requests are declined, memberships are
    released, and the team moves to its terminal deleted state.
    """
    require_user(requesting_user)

    with transaction.atomic():
        team = lock_team(team_id)
        ensure_team_leader(requesting_user, team)

        pending = TeamJoinRequest.objects.select_for_update().filter(
            team=team,
            status=TeamJoinRequest.STATUS_PENDING,
        )
        declined = 0
        for join_request in pending:
            state_machine.transition(join_request, TeamJoinRequest.STATUS_DECLINED, actor=requesting_user)
            declined += 1

        released, _ = TeamMember.objects.filter(team=team).delete()
        state_machine.mark_team_deleted(team, actor=requesting_user)

        ActivityService.log_activity(
            actor=requesting_user,
            verb=ACTIVITY_TEAM_DELETED,
            target=team,
            event=team.event,
            metadata={
                'team_name': team.name,
                'declined_requests': declined,
                'released_members': released,
            },
        )

    logger.info(f"Team deleted: team={team_id}, declined_requests={declined}, released_members={released}")
    return team


@retry_on_conflict
def update_team(team_id, user, **changes) -> Team:
    """
    Edit the team profile. Any member may do this; leadership and
    membership are not editable here.
    """
    require_user(user)
    fields = [key for key in changes if key in PROFILE_FIELDS]

    with transaction.atomic():
        team = lock_team(team_id)
        ensure_team_member(user, team)

        for field in fields:
            setattr(team, field, changes[field])
        if fields:
            team.save(update_fields=fields)

            ActivityService.log_activity(
                actor=user,
                verb=ACTIVITY_TEAM_UPDATED,
                target=team,
                event=team.event,
                metadata={'fields': fields},
            )

    return team
