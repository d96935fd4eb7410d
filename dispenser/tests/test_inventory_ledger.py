from pathlib import Path
from unittest import mock
import tempfile
import threading
import unittest

from dispenser.domain.errors import InsufficientStock, UnknownMedicationAtDevice
from dispenser.events.Event_Bus import EventBus, INVENTORY_LOW_STOCK
from dispenser.infra.database import Database
from dispenser.infra.Medication_Repository import MedicationRepository
from dispenser.logic.inventory.ledger import InventoryLedger
from dispenser.tests.fixtures import HOUSEHOLD, make_database, seed_household


class TestInventoryLedger(unittest.TestCase):

    def setUp(self):
        self.db = make_database()
        seed_household(self.db, remain=8, total=30)
        self.bus = EventBus()
        self.low_stock_events = []
        self.bus.subscribe(INVENTORY_LOW_STOCK, lambda name, payload: self.low_stock_events.append(payload))
        self.ledger = InventoryLedger(self.db, event_bus=self.bus, threshold=5)

    def tearDown(self):
        self.db.dispose()

    def _remain(self):
        return self.ledger.lookup_slot(HOUSEHOLD, "med-x").remain

    def _warning(self):
        return MedicationRepository(self.db).get(HOUSEHOLD, "med-x").warning

    def test_apply_dose_decrements(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        outcome = self.ledger.apply_dose(slot, 2)
        self.assertEqual(outcome.remaining, 6)
        self.assertFalse(outcome.warning_triggered)
        self.assertEqual(self._remain(), 6)
        self.assertEqual(slot.remain, 6)

    def test_insufficient_leaves_stock_unchanged(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        with self.assertRaises(InsufficientStock) as ctx:
            self.ledger.apply_dose(slot, 9)
        self.assertEqual(ctx.exception.remaining, 8)
        self.assertEqual(ctx.exception.requested, 9)
        self.assertEqual(self._remain(), 8)

    def test_stale_slot_is_rechecked_at_write_time(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        self.ledger.apply_dose(self.ledger.require_slot(HOUSEHOLD, "med-x"), 7)
        # ``slot`` still believes 8 are left
        with self.assertRaises(InsufficientStock) as ctx:
            self.ledger.apply_dose(slot, 2)
        self.assertEqual(ctx.exception.remaining, 1)
        self.assertEqual(self._remain(), 1)

    def test_exact_stock_reaches_zero(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        self.assertEqual(self.ledger.apply_dose(slot, 8).remaining, 0)
        self.assertEqual(self._remain(), 0)

    def test_warning_is_monotonic_and_published_once(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        first = self.ledger.apply_dose(slot, 3)
        self.assertEqual(first.remaining, 5)
        self.assertTrue(first.warning_triggered)
        self.assertTrue(self._warning())

        second = self.ledger.apply_dose(slot, 1)
        self.assertFalse(second.warning_triggered)
        self.assertTrue(self._warning())
        self.assertEqual(len(self.low_stock_events), 1)
        self.assertEqual(self.low_stock_events[0]["remaining"], 5)

    def test_request_id_replay_does_not_double_decrement(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        first = self.ledger.apply_dose(slot, 2, request_id="req-1")
        replay = self.ledger.apply_dose(self.ledger.require_slot(HOUSEHOLD, "med-x"), 2, request_id="req-1")
        self.assertFalse(first.replayed)
        self.assertTrue(replay.replayed)
        self.assertEqual(replay.remaining, 6)
        self.assertEqual(self._remain(), 6)

    def test_concurrent_duplicate_item_rolls_back_to_recorded_outcome(self):
        log = self.ledger.dispense_log
        # Another call applied item 0 of req-9 after this call's lookup ran
        log.record("req-9", HOUSEHOLD, "med-x", 0, 2, 6, False)
        recorded = log.find("req-9", HOUSEHOLD, "med-x", 0)
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        with mock.patch.object(log, "find", side_effect=[None, recorded]):
            outcome = self.ledger.apply_dose(slot, 2, request_id="req-9")
        self.assertTrue(outcome.replayed)
        self.assertEqual(outcome.remaining, 6)
        # This call's own decrement was rolled back
        self.assertEqual(self._remain(), 8)
        self.assertEqual(slot.remain, 8)

    def test_same_request_different_positions_both_apply(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        self.ledger.apply_dose(slot, 2, request_id="req-2", item_index=0)
        second = self.ledger.apply_dose(slot, 2, request_id="req-2", item_index=1)
        self.assertFalse(second.replayed)
        self.assertEqual(self._remain(), 4)

    def test_zero_dose_is_a_no_op(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        self.assertEqual(self.ledger.apply_dose(slot, 0).remaining, 8)

    def test_negative_dose_rejected(self):
        slot = self.ledger.require_slot(HOUSEHOLD, "med-x")
        with self.assertRaises(ValueError):
            self.ledger.apply_dose(slot, -1)
        self.assertEqual(self._remain(), 8)

    def test_unknown_medication(self):
        self.assertIsNone(self.ledger.lookup_slot(HOUSEHOLD, "med-none"))
        with self.assertRaises(UnknownMedicationAtDevice):
            self.ledger.require_slot(HOUSEHOLD, "med-none")
        # Scoped by household
        self.assertIsNone(self.ledger.lookup_slot("H2", "med-x"))

    def test_low_stock_listing(self):
        self.assertEqual(self.ledger.low_stock(HOUSEHOLD), [])
        self.ledger.apply_dose(self.ledger.require_slot(HOUSEHOLD, "med-x"), 4)
        self.assertEqual([s.medi_id for s in self.ledger.low_stock(HOUSEHOLD)], ["med-x"])


class TestConcurrentDecrement(unittest.TestCase):
    """Two threads with their own connections against one file-backed database."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db = Database(f"sqlite:///{Path(self.tmp.name) / 'dispenser.db'}").create_all()
        seed_household(self.db, remain=6, total=30)
        self.ledger = InventoryLedger(self.db, event_bus=EventBus())

    def tearDown(self):
        self.db.dispose()
        self.tmp.cleanup()

    def test_only_one_of_two_racing_doses_fits(self):
        # Both callers read remain=6 before either writes
        slots = [self.ledger.require_slot(HOUSEHOLD, "med-x") for _ in range(2)]
        barrier = threading.Barrier(2)
        applied, short, errors = [], [], []

        def dispense(slot):
            barrier.wait()
            try:
                applied.append(self.ledger.apply_dose(slot, 4).remaining)
            except InsufficientStock as e:
                short.append(e.remaining)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=dispense, args=(s,)) for s in slots]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        self.assertEqual(errors, [])
        self.assertEqual(applied, [2])
        self.assertEqual(short, [2])
        self.assertEqual(self.ledger.lookup_slot(HOUSEHOLD, "med-x").remain, 2)


if __name__ == "__main__":
    unittest.main()
