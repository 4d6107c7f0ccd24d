from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from core.constants import ACTIVITY_TEAM_CREATED, ACTIVITY_TEAM_DELETED
from core.models import DomainActivity
from events.catalog import EventNotFound
from events.models import Event
from teams import arbiter, store
from teams.exceptions import (
    AlreadyOnTeam,
    LeaderCannotLeave,
    NotAMember,
    NotLeader,
    TeamFull,
    TeamNotFound,
    Unauthenticated,
)
from teams.models import Team, TeamJoinRequest, TeamMember
from teams.tests.base import TeamFormationTestCase


class CreateTeamTests(TeamFormationTestCase):
    def test_creator_becomes_leader_and_first_member(self):
        team = self.make_team()

        self.assertEqual(team.leader, self.leader)
        self.assertEqual(team.status, Team.STATUS_ACTIVE)
        self.assertEqual(team.roles_required, ["Backend", "Design"])

        membership = TeamMember.objects.get(team=team, user=self.leader)
        self.assertEqual(membership.role, "Leader")
        self.assertEqual(membership.event_id, self.event.id)
        self.assertEqual(team.current_size, 1)

        self.assertTrue(
            DomainActivity.objects.filter(actor=self.leader, verb=ACTIVITY_TEAM_CREATED, object_id=team.id).exists()
        )

    def test_cannot_create_second_team_in_same_event(self):
        self.make_team()

        with self.assertRaises(AlreadyOnTeam):
            self.make_team(name="Team B")

        self.assertEqual(Team.objects.filter(event=self.event).count(), 1)

    def test_member_cannot_create_team_in_same_event(self):
        team = self.make_team()
        self.accept(self.join(team, self.bob))

        with self.assertRaises(AlreadyOnTeam):
            self.make_team(leader=self.bob, name="Bob's Team")

    def test_leader_can_lead_teams_in_different_events(self):
        self.make_team()
        other = self.make_team(event=self.open_event, name="Team A2")

        self.assertEqual(other.event, self.open_event)
        self.assertEqual(TeamMember.objects.filter(user=self.leader).count(), 2)

    def test_creating_a_team_withdraws_pending_request(self):
        team = self.make_team()
        join_request = self.join(team, self.bob)

        self.make_team(leader=self.bob, name="Bob's Team")

        join_request.refresh_from_db()
        self.assertEqual(join_request.status, TeamJoinRequest.STATUS_CANCELLED)
        self.assertIsNotNone(join_request.decided_at)

    def test_unknown_event(self):
        with self.assertRaises(EventNotFound):
            store.create_team(999999, self.leader, name="Nowhere")

    def test_anonymous_user_rejected(self):
        with self.assertRaises(Unauthenticated):
            store.create_team(self.event.id, AnonymousUser(), name="Ghosts")

    def test_no_team_when_capacity_has_no_slot_for_leader(self):
        with mock.patch("teams.store.get_event_capacity", return_value=0):
            with self.assertRaises(TeamFull):
                self.make_team()

        self.assertFalse(Team.objects.filter(event=self.event).exists())
        self.assertFalse(TeamMember.objects.filter(user=self.leader).exists())

    def test_event_capacity_must_be_positive(self):
        event = Event(title="Empty Room", team_capacity=0)
        with self.assertRaises(ValidationError):
            event.full_clean()

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Event.objects.create(title="Empty Room", team_capacity=0)


class AddMemberTests(TeamFormationTestCase):
    def _add(self, team, user, role=None):
        with transaction.atomic():
            locked = store.lock_team(team.id)
            return store.add_member(locked, user, role=role)

    def test_add_member_uses_default_role(self):
        team = self.make_team()

        member = self._add(team, self.bob)

        self.assertEqual(member.role, "Member")
        self.assertEqual(team.current_size, 2)

    def test_add_member_respects_capacity(self):
        team = self.make_team()
        self._add(team, self.bob)

        with self.assertRaises(TeamFull):
            self._add(team, self.carol)

        self.assertFalse(TeamMember.objects.filter(user=self.carol).exists())

    def test_add_member_rejects_user_on_another_team(self):
        team = self.make_team(event=self.open_event)
        self.make_team(leader=self.bob, event=self.open_event, name="Team B")

        with self.assertRaises(AlreadyOnTeam):
            self._add(team, self.bob)

    def test_unbounded_capacity(self):
        team = self.make_team(event=self.open_event)
        for name in ("m1", "m2", "m3", "m4", "m5"):
            self._add(team, self.make_user(name))

        self.assertEqual(team.current_size, 6)
        self.assertIsNone(team.capacity)
        self.assertFalse(team.is_full)


class RemoveMemberTests(TeamFormationTestCase):
    def test_member_can_leave(self):
        team = self.make_team()
        self.accept(self.join(team, self.bob))

        store.remove_member(team.id, self.bob)

        self.assertFalse(TeamMember.objects.filter(team=team, user=self.bob).exists())
        # the freed slot can be taken again
        self.accept(self.join(team, self.carol))
        self.assertEqual(team.current_size, 2)

    def test_non_member_cannot_leave(self):
        team = self.make_team()

        with self.assertRaises(NotAMember):
            store.remove_member(team.id, self.bob)

    def test_leader_cannot_leave(self):
        team = self.make_team()

        with self.assertRaises(LeaderCannotLeave):
            store.remove_member(team.id, self.leader)

        self.assertTrue(TeamMember.objects.filter(team=team, user=self.leader).exists())


class DeleteTeamTests(TeamFormationTestCase):
    def test_only_leader_can_delete(self):
        team = self.make_team()
        self.accept(self.join(team, self.bob))

        with self.assertRaises(NotLeader):
            store.delete_team(team.id, self.bob)

        team.refresh_from_db()
        self.assertEqual(team.status, Team.STATUS_ACTIVE)

    def test_delete_declines_pending_and_releases_members(self):
        team = self.make_team(event=self.open_event)
        requests = [self.join(team, user) for user in (self.bob, self.carol, self.dave)]

        store.delete_team(team.id, self.leader)

        team.refresh_from_db()
        self.assertEqual(team.status, Team.STATUS_DELETED)
        self.assertIsNotNone(team.deleted_at)
        self.assertEqual(TeamMember.objects.filter(team=team).count(), 0)

        for join_request in requests:
            join_request.refresh_from_db()
            self.assertEqual(join_request.status, TeamJoinRequest.STATUS_DECLINED)
            self.assertEqual(join_request.decided_by, self.leader)

        activity = DomainActivity.objects.get(verb=ACTIVITY_TEAM_DELETED, object_id=team.id)
        self.assertEqual(activity.metadata["declined_requests"], 3)
        self.assertEqual(activity.metadata["released_members"], 1)

    def test_everyone_is_free_after_delete(self):
        team = self.make_team(event=self.open_event)
        self.join(team, self.bob)

        store.delete_team(team.id, self.leader)

        other = self.make_team(leader=self.carol, event=self.open_event, name="Team C")
        join_request = self.join(other, self.bob)
        self.assertEqual(join_request.status, TeamJoinRequest.STATUS_PENDING)

        replacement = self.make_team(event=self.open_event, name="Team A, again")
        self.assertTrue(replacement.is_active)

    def test_deleted_team_is_gone(self):
        team = self.make_team()
        store.delete_team(team.id, self.leader)

        with self.assertRaises(TeamNotFound):
            store.delete_team(team.id, self.leader)

        with self.assertRaises(TeamNotFound):
            arbiter.request_to_join(team.id, self.bob)


class UpdateTeamTests(TeamFormationTestCase):
    def test_member_can_edit_profile(self):
        team = self.make_team()
        self.accept(self.join(team, self.bob))

        store.update_team(team.id, self.bob, bio="New bio", is_public=False, status="deleted")

        team.refresh_from_db()
        self.assertEqual(team.bio, "New bio")
        self.assertFalse(team.is_public)
        self.assertEqual(team.status, Team.STATUS_ACTIVE)

    def test_outsider_cannot_edit(self):
        team = self.make_team()

        with self.assertRaises(NotAMember):
            store.update_team(team.id, self.carol, name="Hijacked")

        team.refresh_from_db()
        self.assertEqual(team.name, "Team A")
