from unittest import mock

from django.db import OperationalError
from django.test import SimpleTestCase, override_settings

from teams.exceptions import TeamFull, TransientConflict
from teams.retry import retry_on_conflict


@override_settings(TEAM_FORMATION={"TRANSIENT_RETRY_LIMIT": 3, "RETRY_BACKOFF_SECONDS": 0.01})
@mock.patch("teams.retry.time.sleep")
@mock.patch("teams.retry.connection")
class RetryOnConflictTests(SimpleTestCase):
    def _flaky(self, failures, result="ok"):
        calls = {"count": 0}

        @retry_on_conflict
        def operation():
            calls["count"] += 1
            if calls["count"] <= failures:
                raise OperationalError("could not obtain lock")
            return result

        return operation, calls

    def test_succeeds_after_transient_failures(self, connection, sleep):
        connection.in_atomic_block = False
        operation, calls = self._flaky(failures=2)

        self.assertEqual(operation(), "ok")
        self.assertEqual(calls["count"], 3)
        self.assertEqual(sleep.call_count, 2)

    def test_gives_up_with_transient_conflict(self, connection, sleep):
        connection.in_atomic_block = False
        operation, calls = self._flaky(failures=10)

        with self.assertRaises(TransientConflict):
            operation()

        self.assertEqual(calls["count"], 3)

    def test_no_replay_inside_outer_transaction(self, connection, sleep):
        connection.in_atomic_block = True
        operation, calls = self._flaky(failures=1)

        with self.assertRaises(TransientConflict):
            operation()

        self.assertEqual(calls["count"], 1)
        sleep.assert_not_called()

    def test_business_errors_are_not_retried(self, connection, sleep):
        connection.in_atomic_block = False
        calls = {"count": 0}

        @retry_on_conflict
        def operation():
            calls["count"] += 1
            raise TeamFull()

        with self.assertRaises(TeamFull):
            operation()

        self.assertEqual(calls["count"], 1)
