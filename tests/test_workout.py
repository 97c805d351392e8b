import unittest

from autopilot.laps import Lap, merge_laps_by_pace
from autopilot.numeric_utils import PaceRange
from autopilot.workout import (
    WorkoutDescription,
    build_workout_description,
    collect_reps,
    describe_workout,
    median_seconds,
)


PACE_RANGE = PaceRange(5.5, 7.5)


def _laps(*pairs):
    return [
        Lap(index=index, distance_meters=distance, moving_time_seconds=seconds, elapsed_time_seconds=seconds)
        for index, (distance, seconds) in enumerate(pairs, start=1)
    ]


class TestMedianSeconds(unittest.TestCase):
    def test_odd_count_uses_middle_value(self) -> None:
        self.assertEqual(median_seconds([90, 60, 75]), 75)

    def test_even_count_uses_rounded_mean_of_middle_pair(self) -> None:
        self.assertEqual(median_seconds([60, 61, 63, 90]), 62)
        self.assertEqual(median_seconds([61, 60]), 61)

    def test_empty_list_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            median_seconds([])


class TestDescribeWorkout(unittest.TestCase):
    def test_no_qualifying_laps_means_no_workout(self) -> None:
        laps = _laps((1609, 600), (1609, 610))
        self.assertIsNone(build_workout_description(laps, PACE_RANGE, "mi"))
        self.assertIsNone(build_workout_description([], PACE_RANGE, "mi"))

    def test_merged_block_with_cooldown(self) -> None:
        laps = _laps((400, 90), (400, 91), (400, 500))
        segments = merge_laps_by_pace(laps, PACE_RANGE, "mi")
        self.assertEqual(len(segments), 2)

        workout = describe_workout(segments, PACE_RANGE, "mi")

        self.assertEqual(
            workout,
            WorkoutDescription(
                title="3:00 x 1 (avg 6:02 min/mi)",
                body="1) 3:00 @ 6:02 min/mi + CD",
            ),
        )

    def test_single_rep_has_no_rest(self) -> None:
        laps = _laps((1609, 600), (400, 90), (1609, 600))
        segments = merge_laps_by_pace(laps, PACE_RANGE, "mi")

        reps, cooldown_seconds = collect_reps(segments, PACE_RANGE, "mi")

        self.assertEqual(len(reps), 1)
        self.assertEqual(reps[0].rest_seconds, 0)
        self.assertEqual(cooldown_seconds, 600)

    def test_five_reps_with_rest_and_cooldown(self) -> None:
        pairs = []
        for _ in range(5):
            pairs.extend([(400, 90), (400, 150)])
        pairs.append((1609, 620))
        workout = build_workout_description(_laps(*pairs), PACE_RANGE, "mi")

        self.assertIsNotNone(workout)
        assert workout is not None
        self.assertEqual(workout.title, "1:30 x 5 (avg 6:02 min/mi)")
        lines = workout.body.split("\n")
        self.assertEqual(len(lines), 5)
        for number, line in enumerate(lines[:4], start=1):
            self.assertEqual(line, f"{number}) 1:30 @ 6:02 min/mi + rest 2:30")
        self.assertEqual(lines[4], "5) 1:30 @ 6:02 min/mi + CD")

    def test_last_rep_without_cooldown_has_no_annotation(self) -> None:
        workout = build_workout_description(_laps((400, 90), (400, 150), (400, 93)), PACE_RANGE, "mi")

        assert workout is not None
        self.assertEqual(workout.title, "1:32 x 2 (avg 6:08 min/mi)")
        self.assertEqual(
            workout.body,
            "1) 1:30 @ 6:02 min/mi + rest 2:30\n2) 1:33 @ 6:14 min/mi",
        )

    def test_warmup_before_first_rep_is_ignored(self) -> None:
        segments = merge_laps_by_pace(
            _laps((1609, 600), (400, 90), (400, 150), (400, 90)),
            PACE_RANGE,
            "mi",
        )
        reps, cooldown_seconds = collect_reps(segments, PACE_RANGE, "mi")

        self.assertEqual(len(reps), 2)
        self.assertEqual(reps[0].rest_seconds, 150)
        self.assertEqual(reps[1].rest_seconds, 0)
        self.assertEqual(cooldown_seconds, 0)

    def test_rest_and_rep_times_snap_to_whole_minutes(self) -> None:
        workout = build_workout_description(
            _laps((1000, 301), (200, 301), (1000, 299)),
            PaceRange(7.5, 8.5),
            "mi",
        )

        assert workout is not None
        self.assertTrue(workout.title.startswith("5:00 x 2 (avg "))
        self.assertIn("1) 5:00 @ ", workout.body)
        self.assertIn(" + rest 5:00", workout.body)
        self.assertIn("2) 5:00 @ ", workout.body)

    def test_update_payload_shape(self) -> None:
        workout = WorkoutDescription(title="3:00 x 1 (avg 6:02 min/mi)", body="1) 3:00 @ 6:02 min/mi")
        self.assertEqual(
            workout.as_update_payload(),
            {"name": "3:00 x 1 (avg 6:02 min/mi)", "description": "1) 3:00 @ 6:02 min/mi"},
        )


if __name__ == "__main__":
    unittest.main()
