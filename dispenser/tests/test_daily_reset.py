from datetime import datetime
from unittest import mock
import threading
import unittest

from dispenser.domain.errors import TransientStorageFailure
from dispenser.events.Event_Bus import EventBus, MEMBERS_DAILY_RESET
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.logic.reset.daily import DailyResetScheduler, reset_taken_today, seconds_until_next_run
from dispenser.tests.fixtures import CHILD_TOKEN, PARENT_TOKEN, make_database, seed_household


class TestResetTakenToday(unittest.TestCase):

    def setUp(self):
        self.db = make_database()
        seed_household(self.db)
        self.members = MemberRepository(self.db)

    def tearDown(self):
        self.db.dispose()

    def test_reset_clears_every_member(self):
        self.members.mark_taken_today(PARENT_TOKEN)
        self.assertTrue(self.members.get("u1").has_taken_today)

        bus = EventBus()
        events = []
        bus.subscribe(MEMBERS_DAILY_RESET, lambda name, payload: events.append(payload))
        # u2 is already 0 and still counts as matched
        self.assertEqual(reset_taken_today(self.members, event_bus=bus), 2)
        self.assertFalse(self.members.get("u1").has_taken_today)
        self.assertFalse(self.members.get("u2").has_taken_today)
        self.assertEqual(events, [{"affected": 2}])

    def test_confirm_works_again_after_reset(self):
        self.assertTrue(self.members.mark_taken_today(CHILD_TOKEN))
        self.assertFalse(self.members.mark_taken_today(CHILD_TOKEN))
        reset_taken_today(self.members, event_bus=EventBus())
        self.assertTrue(self.members.mark_taken_today(CHILD_TOKEN))

    def test_failure_is_logged_not_raised(self):
        broken = mock.Mock(spec=MemberRepository)
        broken.reset_all_taken_today.side_effect = TransientStorageFailure("daily reset")
        with self.assertLogs("dispenser.logic.reset.daily", level="ERROR"):
            self.assertIsNone(reset_taken_today(broken, event_bus=EventBus()))


class TestSchedule(unittest.TestCase):

    def test_seconds_until_next_run(self):
        self.assertEqual(seconds_until_next_run(datetime(2025, 1, 6, 23, 0), 0), 3600)
        self.assertEqual(seconds_until_next_run(datetime(2025, 1, 6, 0, 0), 0), 86400)
        self.assertEqual(seconds_until_next_run(datetime(2025, 1, 6, 1, 30), 3), 5400)

    def test_invalid_hour(self):
        with self.assertRaises(ValueError):
            DailyResetScheduler(lambda: None, hour=24)

    def test_scheduler_runs_and_stops(self):
        ran = threading.Event()
        clock = ClockResolver.fixed(datetime(2025, 1, 6, 23, 59, 59, 950000))
        scheduler = DailyResetScheduler(ran.set, clock=clock, hour=0)
        scheduler.start()
        try:
            self.assertTrue(ran.wait(timeout=5))
            self.assertTrue(scheduler.running)
        finally:
            scheduler.stop()
        self.assertFalse(scheduler.running)


if __name__ == "__main__":
    unittest.main()
