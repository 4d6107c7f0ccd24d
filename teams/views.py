# teams/views.py - Team Formation API Views

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status
from rest_framework.exceptions import ValidationError

from core.identity import current_user

from . import arbiter, queries, store
from .serializers import (
    JoinRequestCreateSerializer,
    JoinRequestSerializer,
    RespondToRequestSerializer,
    RosterEntrySerializer,
    TeamProfileSerializer,
    TeamSerializer,
)


class EventTeamListCreateView(APIView):
    """
    GET  /api/events/<event_id>/teams/   teams in the event
    POST /api/events/<event_id>/teams/   create a team led by the caller
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        teams = queries.get_teams_for_event(event_id, viewer=request.user)
        return Response(TeamSerializer(teams, many=True).data)

    def post(self, request, event_id):
        user = current_user(request)

        serializer = TeamProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = store.create_team(event_id, user, **serializer.validated_data)
        return Response(
            TeamSerializer(queries.get_team(team.id)).data,
            status=status.HTTP_201_CREATED,
        )


class MyTeamView(APIView):
    """GET /api/events/<event_id>/my-team/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        user = current_user(request)
        team = queries.get_user_team_for_event(user.id, event_id)
        if team is None:
            return Response({"team": None})
        return Response({"team": TeamSerializer(team).data})


class TeamDetailView(APIView):
    """
    GET    /api/teams/<team_id>/   team profile (private teams: members only)
    PATCH  /api/teams/<team_id>/   edit profile (members)
    DELETE /api/teams/<team_id>/   delete team (leader)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, team_id):
        team = queries.get_team_for_viewer(team_id, request.user)
        return Response(TeamSerializer(team).data)

    def patch(self, request, team_id):
        user = current_user(request)

        serializer = TeamProfileSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        store.update_team(team_id, user, **serializer.validated_data)
        return Response(TeamSerializer(queries.get_team(team_id)).data)

    def delete(self, request, team_id):
        user = current_user(request)
        store.delete_team(team_id, user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TeamRosterView(APIView):
    """GET /api/teams/<team_id>/roster/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, team_id):
        queries.get_team_for_viewer(team_id, request.user)
        roster = queries.get_team_roster(team_id)
        return Response(RosterEntrySerializer(roster, many=True).data)


class JoinTeamView(APIView):
    """
    POST /api/teams/<team_id>/join/
    Body: {"preferred_role": "Designer"}   (optional)
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, team_id):
        user = current_user(request)

        serializer = JoinRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = arbiter.request_to_join(
            team_id,
            user,
            preferred_role=serializer.validated_data.get('preferred_role'),
        )
        return Response(JoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)


class LeaveTeamView(APIView):
    """POST /api/teams/<team_id>/leave/ (members only, leaders cannot leave)"""
    permission_classes = [IsAuthenticated]

    def post(self, request, team_id):
        user = current_user(request)
        arbiter.leave_team(team_id, user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class LeaderJoinRequestListView(APIView):
    """GET /api/teams/join-requests/ - pending requests on teams the caller leads"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = current_user(request)
        requests = queries.get_pending_requests_for_leader(user.id)
        return Response(JoinRequestSerializer(requests, many=True).data)


class MyJoinRequestListView(APIView):
    """GET /api/teams/my-requests/?event=<event_id>"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = current_user(request)
        event_id = request.query_params.get('event')
        if event_id is not None and not event_id.isdigit():
            raise ValidationError({"event": "event must be an integer id"})

        requests = queries.get_requests_for_requester(user.id, event_id=event_id)
        return Response(JoinRequestSerializer(requests, many=True).data)


class RespondToJoinRequestView(APIView):
    """
    POST /api/teams/join-requests/<request_id>/respond/
    Body: {"action": "accept" | "decline"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        user = current_user(request)

        serializer = RespondToRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        join_request = arbiter.respond_to_request(request_id, user, serializer.validated_data['action'])
        return Response(JoinRequestSerializer(join_request).data)


class CancelJoinRequestView(APIView):
    """POST /api/teams/join-requests/<request_id>/cancel/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        user = current_user(request)
        join_request = arbiter.cancel_own_request(request_id, user)
        return Response(JoinRequestSerializer(join_request).data)
