# teams/queries.py
"""
Membership Query Service: read-only projections over teams and requests.

Reads hit the database directly, so they reflect every committed
accept/decline/delete immediately.
"""
from typing import List, Optional, Tuple

from django.db.models import Count, Q

from events.catalog import get_event

from .exceptions import TeamNotFound, TeamPrivate
from .models import Team, TeamJoinRequest, TeamMember
from .policies import TeamPolicy


def active_teams():
    return Team.objects.filter(status=Team.STATUS_ACTIVE)


def _with_counts(queryset):
    return queryset.annotate(
        member_count=Count('members', distinct=True),
        pending_request_count=Count(
            'join_requests',
            filter=Q(join_requests__status=TeamJoinRequest.STATUS_PENDING),
            distinct=True,
        ),
    )


def get_user_team_for_event(user_id, event_id) -> Optional[Team]:
    return (
        active_teams()
        .filter(event_id=event_id, members__user_id=user_id)
        .select_related('event', 'leader')
        .prefetch_related('members__user')
        .first()
    )


def get_pending_requests_for_leader(leader_user_id) -> List[TeamJoinRequest]:
    return list(
        TeamJoinRequest.objects
        .filter(
            status=TeamJoinRequest.STATUS_PENDING,
            team__leader_id=leader_user_id,
            team__status=Team.STATUS_ACTIVE,
        )
        .select_related('team', 'event', 'requester')
        .order_by('-created_at', '-id')
    )


def get_team_roster(team_id) -> List[Tuple[object, str]]:
    """(user, role) pairs in join order, leader first."""
    if not active_teams().filter(pk=team_id).exists():
        raise TeamNotFound()

    members = (
        TeamMember.objects
        .filter(team_id=team_id)
        .select_related('user')
        .order_by('joined_at', 'id')
    )
    return [(member.user, member.role) for member in members]


def get_teams_for_event(event_id, viewer=None) -> List[Team]:
    """
    Active teams in the event, oldest first, annotated with member and
    pending-request counts. Private teams are hidden from outsiders.
    """
    event = get_event(event_id)
    queryset = active_teams().filter(event=event)

    if viewer is not None and not (viewer.is_authenticated and viewer.is_staff):
        visible = Q(is_public=True)
        if viewer.is_authenticated:
            visible |= Q(pk__in=TeamMember.objects.filter(user=viewer).values('team_id'))
        queryset = queryset.filter(visible)

    return list(
        _with_counts(queryset)
        .select_related('event', 'leader')
        .prefetch_related('members__user')
        .order_by('created_at', 'id')
    )


def get_team(team_id) -> Team:
    team = (
        _with_counts(active_teams().filter(pk=team_id))
        .select_related('event', 'leader')
        .prefetch_related('members__user')
        .first()
    )
    if team is None:
        raise TeamNotFound()
    return team


def get_team_for_viewer(team_id, viewer) -> Team:
    team = get_team(team_id)
    if not TeamPolicy.can_view(viewer, team):
        raise TeamPrivate()
    return team


def get_requests_for_requester(user_id, event_id=None) -> List[TeamJoinRequest]:
    queryset = TeamJoinRequest.objects.filter(requester_id=user_id)
    if event_id is not None:
        queryset = queryset.filter(event_id=event_id)
    return list(
        queryset
        .select_related('team', 'event', 'requester')
        .order_by('-created_at', '-id')
    )
