# teams/policies.py
"""
Centralized team formation policy layer.

All "who may do this to the team" checks live here. Views and services call
these instead of comparing user ids inline.
"""
from .exceptions import NotLeader, NotAMember
from .models import Team, TeamMember


class TeamPolicy:
    """
    Permission checks for teams.
    All methods return bool.
    """

    @staticmethod
    def is_leader(user, team: Team) -> bool:
        """Check if user is the team leader."""
        if not user or not user.is_authenticated or team is None:
            return False
        return team.leader_id == user.pk

    @staticmethod
    def is_member(user, team: Team) -> bool:
        """Check if user is on the team (leader included)."""
        if not user or not user.is_authenticated or team is None:
            return False
        return TeamMember.objects.filter(team=team, user=user).exists()

    @staticmethod
    def can_view(user, team: Team) -> bool:
        """Public teams are visible to everyone; private ones to members and staff."""
        if team.is_public:
            return True
        if user and user.is_authenticated and user.is_staff:
            return True
        return TeamPolicy.is_member(user, team)


def ensure_team_leader(user, team: Team) -> None:
    """
    Single gate for every leader-only operation (respond, delete).
    """
    if not TeamPolicy.is_leader(user, team):
        raise NotLeader()


def ensure_team_member(user, team: Team) -> None:
    if not TeamPolicy.is_member(user, team):
        raise NotAMember()
