from teams import state_machine
from teams.exceptions import RequestNotPending
from teams.models import Team, TeamJoinRequest
from teams.tests.base import TeamFormationTestCase


class JoinRequestStateMachineTests(TeamFormationTestCase):
    def setUp(self):
        super().setUp()
        self.team = self.make_team()
        self.join_request = self.join(self.team, self.bob)

    def test_pending_can_move_to_any_terminal_status(self):
        for status in (
            TeamJoinRequest.STATUS_ACCEPTED,
            TeamJoinRequest.STATUS_DECLINED,
            TeamJoinRequest.STATUS_CANCELLED,
        ):
            can, reason = state_machine.can_transition(self.join_request, status)
            self.assertTrue(can, reason)

    def test_terminal_statuses_are_final(self):
        self.assertFalse(state_machine.is_terminal_status(TeamJoinRequest.STATUS_PENDING))
        for status in (
            TeamJoinRequest.STATUS_ACCEPTED,
            TeamJoinRequest.STATUS_DECLINED,
            TeamJoinRequest.STATUS_CANCELLED,
        ):
            self.assertTrue(state_machine.is_terminal_status(status))

    def test_unknown_status_rejected(self):
        can, reason = state_machine.can_transition(self.join_request, "archived")

        self.assertFalse(can)
        self.assertIn("Invalid status", reason)

    def test_transition_stamps_decision(self):
        state_machine.transition(self.join_request, TeamJoinRequest.STATUS_DECLINED, actor=self.leader)

        self.join_request.refresh_from_db()
        self.assertEqual(self.join_request.status, TeamJoinRequest.STATUS_DECLINED)
        self.assertEqual(self.join_request.decided_by, self.leader)
        self.assertIsNotNone(self.join_request.decided_at)

    def test_decided_request_never_reopens(self):
        state_machine.transition(self.join_request, TeamJoinRequest.STATUS_DECLINED, actor=self.leader)

        for status in (TeamJoinRequest.STATUS_PENDING, TeamJoinRequest.STATUS_ACCEPTED):
            with self.assertRaises(RequestNotPending):
                state_machine.transition(self.join_request, status, actor=self.leader)

        self.join_request.refresh_from_db()
        self.assertEqual(self.join_request.status, TeamJoinRequest.STATUS_DECLINED)

    def test_transition_without_save(self):
        state_machine.transition(self.join_request, TeamJoinRequest.STATUS_ACCEPTED, save=False)

        fresh = TeamJoinRequest.objects.get(pk=self.join_request.pk)
        self.assertEqual(fresh.status, TeamJoinRequest.STATUS_PENDING)


class TeamStateMachineTests(TeamFormationTestCase):
    def test_deleted_team_cannot_be_deleted_again(self):
        team = self.make_team()
        state_machine.mark_team_deleted(team, actor=self.leader)

        self.assertEqual(team.status, Team.STATUS_DELETED)
        with self.assertRaises(ValueError):
            state_machine.mark_team_deleted(team, actor=self.leader)
