import unittest

import requests

from autopilot.lap_poller import PollOutcome, fetch_laps_with_retry, max_attempts_for, poll_laps
from autopilot.run_context import ReadBudget


LAPS = [{"lap_index": 1, "distance": 400, "moving_time": 90}]


class _ScriptedFetch:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, activity_id):
        self.calls.append(activity_id)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class TestMaxAttempts(unittest.TestCase):
    def test_attempts_from_interval_and_budget(self) -> None:
        self.assertEqual(max_attempts_for(60, 30), 30)
        self.assertEqual(max_attempts_for(45, 2), 2)

    def test_at_least_one_attempt(self) -> None:
        self.assertEqual(max_attempts_for(120, 1), 1)
        self.assertEqual(max_attempts_for(60, 0), 1)


class TestPollLaps(unittest.TestCase):
    def test_returns_immediately_when_laps_exist(self) -> None:
        fetch = _ScriptedFetch([LAPS])
        sleeps = []

        result = poll_laps(fetch, 42, interval_seconds=60, max_minutes=30, can_continue=lambda: True, sleep=sleeps.append)

        self.assertEqual(result.outcome, PollOutcome.SUCCESS)
        self.assertEqual(result.laps, LAPS)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(sleeps, [])

    def test_empty_results_and_failures_are_retried(self) -> None:
        fetch = _ScriptedFetch([[], requests.ConnectionError("boom"), LAPS])
        sleeps = []

        laps = fetch_laps_with_retry(
            fetch, 42, interval_seconds=60, max_minutes=30, can_continue=lambda: True, sleep=sleeps.append
        )

        self.assertEqual(laps, LAPS)
        self.assertEqual(fetch.calls, [42, 42, 42])
        self.assertEqual(sleeps, [60, 60])

    def test_exhausts_after_max_attempts_without_trailing_sleep(self) -> None:
        fetch = _ScriptedFetch([[], [], []])
        sleeps = []

        result = poll_laps(fetch, 7, interval_seconds=60, max_minutes=3, can_continue=lambda: True, sleep=sleeps.append)

        self.assertEqual(result.outcome, PollOutcome.EXHAUSTED)
        self.assertIsNone(result.laps)
        self.assertEqual(result.attempts, 3)
        self.assertEqual(sleeps, [60, 60])

    def test_budget_veto_stops_before_fetching(self) -> None:
        fetch = _ScriptedFetch([[], LAPS])
        budget = ReadBudget(1)
        sleeps = []

        laps = fetch_laps_with_retry(
            fetch, 7, interval_seconds=60, max_minutes=30, can_continue=budget.try_consume_read, sleep=sleeps.append
        )

        self.assertIsNone(laps)
        self.assertEqual(len(fetch.calls), 1)
        self.assertEqual(budget.reads_used, 1)
        self.assertEqual(sleeps, [60])

    def test_spent_budget_skips_the_wait(self) -> None:
        fetch = _ScriptedFetch([[], LAPS])
        budget = ReadBudget(1)
        sleeps = []

        result = poll_laps(
            fetch,
            7,
            interval_seconds=60,
            max_minutes=30,
            can_continue=budget.try_consume_read,
            sleep=sleeps.append,
            reads_left=lambda: not budget.exhausted,
        )

        self.assertEqual(result.outcome, PollOutcome.EXHAUSTED)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(len(fetch.calls), 1)
        self.assertEqual(sleeps, [])

    def test_waits_while_reads_remain(self) -> None:
        fetch = _ScriptedFetch([[], LAPS])
        budget = ReadBudget(5)
        sleeps = []

        laps = fetch_laps_with_retry(
            fetch,
            7,
            interval_seconds=60,
            max_minutes=30,
            can_continue=budget.try_consume_read,
            sleep=sleeps.append,
            reads_left=lambda: not budget.exhausted,
        )

        self.assertEqual(laps, LAPS)
        self.assertEqual(sleeps, [60])

    def test_http_errors_are_not_fatal(self) -> None:
        fetch = _ScriptedFetch([requests.HTTPError("404"), requests.HTTPError("404")])

        result = poll_laps(fetch, 7, interval_seconds=30, max_minutes=1, can_continue=lambda: True, sleep=lambda _s: None)

        self.assertEqual(result.outcome, PollOutcome.EXHAUSTED)
        self.assertEqual(result.attempts, 2)


class TestReadBudget(unittest.TestCase):
    def test_consumes_until_ceiling(self) -> None:
        budget = ReadBudget(2)
        self.assertTrue(budget.try_consume_read())
        self.assertTrue(budget.try_consume_read())
        self.assertFalse(budget.try_consume_read())
        self.assertTrue(budget.exhausted)
        self.assertEqual(budget.snapshot(), {"max_reads": 2, "reads_used": 2, "reads_remaining": 0})

    def test_remaining_counts_down(self) -> None:
        budget = ReadBudget(3)
        self.assertEqual(budget.remaining, 3)
        budget.try_consume_read()
        self.assertEqual(budget.remaining, 2)
        self.assertEqual(ReadBudget(-4).remaining, 0)


if __name__ == "__main__":
    unittest.main()
