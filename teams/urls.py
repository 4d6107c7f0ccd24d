# teams/urls.py - Team formation API

from django.urls import path

from .views import (
    CancelJoinRequestView,
    EventTeamListCreateView,
    JoinTeamView,
    LeaderJoinRequestListView,
    LeaveTeamView,
    MyJoinRequestListView,
    MyTeamView,
    RespondToJoinRequestView,
    TeamDetailView,
    TeamRosterView,
)

urlpatterns = [
    # Event-scoped
    path("events/<int:event_id>/teams/", EventTeamListCreateView.as_view(), name="event-teams"),
    path("events/<int:event_id>/my-team/", MyTeamView.as_view(), name="event-my-team"),

    # Join requests
    path("teams/join-requests/", LeaderJoinRequestListView.as_view(), name="leader-join-requests"),
    path("teams/my-requests/", MyJoinRequestListView.as_view(), name="my-join-requests"),
    path(
        "teams/join-requests/<int:request_id>/respond/",
        RespondToJoinRequestView.as_view(),
        name="join-request-respond",
    ),
    path(
        "teams/join-requests/<int:request_id>/cancel/",
        CancelJoinRequestView.as_view(),
        name="join-request-cancel",
    ),

    # Team-scoped
    path("teams/<int:team_id>/", TeamDetailView.as_view(), name="team-detail"),
    path("teams/<int:team_id>/roster/", TeamRosterView.as_view(), name="team-roster"),
    path("teams/<int:team_id>/join/", JoinTeamView.as_view(), name="team-join"),
    path("teams/<int:team_id>/leave/", LeaveTeamView.as_view(), name="team-leave"),
]
