import unittest

from autopilot.markers import (
    ProcessedMarker,
    is_already_renamed,
    is_default_name,
    is_race,
    looks_like_run,
    matched_markers,
)


class TestProcessedMarkers(unittest.TestCase):
    def test_easy_run_marker_is_case_insensitive(self) -> None:
        self.assertEqual(matched_markers("easy run"), [ProcessedMarker.EASY_RUN])

    def test_week_total_marker(self) -> None:
        self.assertEqual(
            matched_markers("Morning Run (Week Total: 31.2 mi)"),
            [ProcessedMarker.WEEK_TOTAL],
        )

    def test_interval_header_must_lead(self) -> None:
        self.assertEqual(matched_markers("6:30 x 5 (avg 6:12 min/mi)"), [ProcessedMarker.INTERVAL_HEADER])
        self.assertEqual(matched_markers("Track 6:30 x 5"), [])

    def test_plain_names_are_not_processed(self) -> None:
        self.assertFalse(is_already_renamed("Morning Run"))
        self.assertFalse(is_already_renamed(None))
        self.assertFalse(is_already_renamed(""))


class TestEligibility(unittest.TestCase):
    def test_default_name_requires_exact_match(self) -> None:
        defaults = ("Morning Run", "Evening Run")
        self.assertTrue(is_default_name("Morning Run", defaults))
        self.assertFalse(is_default_name("morning run", defaults))
        self.assertFalse(is_default_name("Morning Run!", defaults))
        self.assertFalse(is_default_name(None, defaults))

    def test_looks_like_run_checks_type_and_sport_type(self) -> None:
        self.assertTrue(looks_like_run({"type": "Run"}))
        self.assertTrue(looks_like_run({"type": "Workout", "sport_type": "TrailRun"}))
        self.assertFalse(looks_like_run({"type": "Ride", "sport_type": "Ride"}))
        self.assertFalse(looks_like_run({}))

    def test_is_race(self) -> None:
        self.assertTrue(is_race({"workout_type": 1}))
        self.assertFalse(is_race({"workout_type": 3}))
        self.assertFalse(is_race({}))


if __name__ == "__main__":
    unittest.main()
