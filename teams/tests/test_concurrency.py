import threading

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TransactionTestCase, override_settings

from events.models import Event
from teams import arbiter, store
from teams.exceptions import AlreadyOnTeam, RequestNotPending, TeamFormationError, TeamFull
from teams.models import TeamJoinRequest, TeamMember


User = get_user_model()


def run_concurrently(*callables):
    """Start every callable at once; return what each returned or raised."""
    barrier = threading.Barrier(len(callables))
    results = [None] * len(callables)

    def worker(index, func):
        try:
            barrier.wait()
            results[index] = func()
        except Exception as e:
            results[index] = e
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(i, f)) for i, f in enumerate(callables)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return results


# SQLite has no row locks; it serializes writers and the losers are replayed by the retry wrapper
@override_settings(TEAM_FORMATION={
    "TRANSIENT_RETRY_LIMIT": 25,
    "RETRY_BACKOFF_SECONDS": 0.02,
    "ROLE_LEADER": "Leader",
    "DEFAULT_MEMBER_ROLE": "Member",
})
class ConcurrentArbitrationTests(TransactionTestCase):
    def setUp(self):
        self.event = Event.objects.create(title="Hack Night", team_capacity=3)
        self.leader = User.objects.create_user(username="leader", password="pass1234")
        self.team = store.create_team(self.event.id, self.leader, name="Team A")

    def test_simultaneous_accepts_never_overfill(self):
        requests = []
        for i in range(6):
            user = User.objects.create_user(username=f"user{i}", password="pass1234")
            requests.append(arbiter.request_to_join(self.team.id, user))

        results = run_concurrently(*[
            (lambda r=r: arbiter.respond_to_request(r.id, self.leader, "accept"))
            for r in requests
        ])

        accepted = [r for r in results if isinstance(r, TeamJoinRequest)]
        rejected = [r for r in results if isinstance(r, TeamFormationError)]
        self.assertEqual(len(accepted), 2, results)
        self.assertEqual(len(rejected), 4, results)
        self.assertTrue(all(isinstance(e, TeamFull) for e in rejected), results)

        self.assertEqual(TeamMember.objects.filter(team=self.team).count(), 3)
        self.assertEqual(
            TeamJoinRequest.objects.filter(team=self.team, status=TeamJoinRequest.STATUS_PENDING).count(),
            4,
        )

    def test_accept_races_with_requester_creating_team(self):
        bob = User.objects.create_user(username="bob", password="pass1234")
        join_request = arbiter.request_to_join(self.team.id, bob)

        results = run_concurrently(
            lambda: arbiter.respond_to_request(join_request.id, self.leader, "accept"),
            lambda: store.create_team(self.event.id, bob, name="Team B"),
        )

        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(failures), 1, results)
        self.assertIsInstance(failures[0], (AlreadyOnTeam, RequestNotPending))
        self.assertEqual(TeamMember.objects.filter(event=self.event, user=bob).count(), 1)

        join_request.refresh_from_db()
        self.assertFalse(join_request.is_pending)
