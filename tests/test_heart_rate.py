import unittest

from autopilot.stat_modules.heart_rate import format_avg_hr_description


class TestAvgHeartRateDescription(unittest.TestCase):
    def test_without_max_hr(self) -> None:
        self.assertEqual(format_avg_hr_description(142.6), "Avg HR: 143 bpm")

    def test_with_max_hr(self) -> None:
        self.assertEqual(format_avg_hr_description(142.6, 190), "Avg HR: 143 bpm (75% max)")

    def test_missing_heart_rate(self) -> None:
        self.assertEqual(format_avg_hr_description(None, 190), "")


if __name__ == "__main__":
    unittest.main()
