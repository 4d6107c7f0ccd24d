from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from teams.models import Team, TeamJoinRequest


class SeedTeamsCommandTests(TestCase):
    def test_seeds_team_and_request(self):
        call_command("seed_teams", "--capacity", "3", stdout=StringIO())

        team = Team.objects.get(name="Green Coders")
        self.assertEqual(team.leader.username, "alice")
        self.assertEqual(team.capacity, 3)
        self.assertTrue(
            TeamJoinRequest.objects.filter(team=team, requester__username="bob", status="pending").exists()
        )

    def test_rerun_is_harmless(self):
        call_command("seed_teams", stdout=StringIO())
        out = StringIO()

        call_command("seed_teams", stdout=out)

        self.assertEqual(Team.objects.filter(name="Green Coders").count(), 1)
        self.assertIn("Skipped join request for bob", out.getvalue())
