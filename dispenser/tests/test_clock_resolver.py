from datetime import date, datetime, timedelta, timezone
import unittest

from dispenser.logic.clock.resolver import (
    ClockResolver,
    day_of_week_for,
    remaining_slots_for_hour,
    time_of_day_for_hour,
)
from dispenser.utilities.constants import TIME_SLOTS


class TestTimeOfDay(unittest.TestCase):

    def test_hour_boundaries(self):
        expected = {0: "morning", 11: "morning", 12: "afternoon", 17: "afternoon", 18: "evening", 23: "evening"}
        for hour, slot in expected.items():
            with self.subTest(hour=hour):
                self.assertEqual(time_of_day_for_hour(hour), slot)

    def test_remaining_slots(self):
        self.assertEqual(remaining_slots_for_hour(8), ["morning", "afternoon", "evening"])
        self.assertEqual(remaining_slots_for_hour(12), ["afternoon", "evening"])
        self.assertEqual(remaining_slots_for_hour(23), ["evening"])

    def test_remaining_slots_are_a_suffix_starting_at_current(self):
        for hour in range(24):
            slots = remaining_slots_for_hour(hour)
            self.assertEqual(slots[0], time_of_day_for_hour(hour))
            self.assertEqual(list(TIME_SLOTS[-len(slots):]), slots)

    def test_invalid_hour(self):
        with self.assertRaises(ValueError):
            time_of_day_for_hour(24)
        with self.assertRaises(ValueError):
            time_of_day_for_hour(-1)

    def test_day_codes(self):
        self.assertEqual(day_of_week_for(date(2025, 1, 6)), "mon")
        self.assertEqual(day_of_week_for(date(2025, 1, 12)), "sun")


class TestClockResolver(unittest.TestCase):

    def test_fixed_clock(self):
        clock = ClockResolver.fixed(datetime(2025, 1, 8, 18, 0))
        self.assertEqual(clock.current_day_of_week(), "wed")
        self.assertEqual(clock.current_time_of_day(), "evening")
        self.assertEqual(clock.remaining_time_slots_today(), ["evening"])
        self.assertEqual(clock.today(), date(2025, 1, 8))

    def test_timezone_conversion(self):
        # 2025-01-06 22:00 UTC is already Tuesday morning at UTC+9
        utc_now = datetime(2025, 1, 6, 22, 0, tzinfo=timezone.utc)
        clock = ClockResolver(now_fn=lambda: utc_now, tz=timezone(timedelta(hours=9)))
        self.assertEqual(clock.current_day_of_week(), "tue")
        self.assertEqual(clock.current_time_of_day(), "morning")


if __name__ == "__main__":
    unittest.main()
