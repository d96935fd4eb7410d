from datetime import date
import unittest

from dispenser.domain.Medication import Medication
from dispenser.domain.ScheduleEntry import ScheduleEntry
from dispenser.logic.schedule.audience import is_recipient, is_within_validity


class TestAudienceFilter(unittest.TestCase):

    def setUp(self):
        self.entry = ScheduleEntry(schedule_id="s1", connect="H1", medi_id="med-x", dose=1,
                                   time_of_day="morning", user_id="u1")

    def test_no_target_list_means_everyone(self):
        med = Medication(medi_id="med-x", connect="H1", name="Vitamin D")
        self.assertTrue(is_recipient(self.entry, med, "u1"))
        self.assertTrue(is_recipient(self.entry, med, "u2"))

    def test_empty_target_list_means_everyone(self):
        med = Medication(medi_id="med-x", connect="H1", name="Vitamin D", target_users=[])
        self.assertIsNone(med.target_users)
        self.assertTrue(is_recipient(self.entry, med, "u2"))

    def test_target_list_restricts(self):
        med = Medication(medi_id="med-x", connect="H1", name="Vitamin D", target_users=["u1"])
        self.assertTrue(is_recipient(self.entry, med, "u1"))
        self.assertFalse(is_recipient(self.entry, med, "u2"))

    def test_missing_medication_passes(self):
        self.assertTrue(is_recipient(self.entry, None, "u1"))
        self.assertTrue(is_within_validity(None, date(2025, 1, 6)))

    def test_validity_window(self):
        med = Medication(medi_id="med-x", connect="H1", name="Antibiotic",
                         start_date="2025-01-01", end_date="2025-01-07")
        self.assertFalse(is_within_validity(med, date(2024, 12, 31)))
        self.assertTrue(is_within_validity(med, date(2025, 1, 1)))
        self.assertTrue(is_within_validity(med, date(2025, 1, 7)))
        self.assertFalse(is_within_validity(med, date(2025, 1, 8)))


if __name__ == "__main__":
    unittest.main()
