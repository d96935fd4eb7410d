"""Inventory ledger: per (household, medication) machine stock.

apply_dose() is the only writer of ``machine.remain`` in this service. The
read-compare-decrement cycle is a single conditional UPDATE inside one
transaction, together with the low-stock flag and the optional request log,
so concurrent callers (threads or separate processes) cannot drive stock
below zero. The warning flag is sticky: it is only ever set here, clearing
belongs to refill.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional

from dispenser.domain.MachineSlot import MachineSlot
from dispenser.domain.errors import InsufficientStock, UnknownMedicationAtDevice
from dispenser.events.Event_Bus import EventBus
from dispenser.events.event_helpers import publish_low_stock
from dispenser.infra.database import Database
from dispenser.infra.Dispense_Log_Repository import DispenseLogRepository
from dispenser.infra.Machine_Repository import MachineRepository
from dispenser.infra.Medication_Repository import MedicationRepository
from dispenser.utilities.config import LOW_STOCK_THRESHOLD

__all__ = ["DoseOutcome", "InventoryLedger"]


class _AlreadyRecorded(Exception):
    """Another call logged the same request item first."""


@dataclass(frozen=True)
class DoseOutcome:
    remaining: int
    warning_triggered: bool
    replayed: bool = False


class InventoryLedger:
    def __init__(self, database: Database, machines: Optional[MachineRepository] = None,
                 medications: Optional[MedicationRepository] = None,
                 dispense_log: Optional[DispenseLogRepository] = None,
                 event_bus: Optional[EventBus] = None, threshold: int = LOW_STOCK_THRESHOLD,
                 logger: Optional[logging.Logger] = None):
        self.database = database
        self.machines = machines or MachineRepository(database)
        self.medications = medications or MedicationRepository(database)
        self.dispense_log = dispense_log or DispenseLogRepository(database)
        self.event_bus = event_bus
        self.threshold = threshold
        self.logger = logger or logging.getLogger(__name__)

    def lookup_slot(self, group_id: str, medication_id: str) -> Optional[MachineSlot]:
        return self.machines.find_slot(group_id, medication_id)

    def require_slot(self, group_id: str, medication_id: str) -> MachineSlot:
        slot = self.lookup_slot(group_id, medication_id)
        if slot is None:
            raise UnknownMedicationAtDevice(group_id, medication_id)
        return slot

    def _replayed(self, request_id: str, slot: MachineSlot, prior: dict) -> DoseOutcome:
        self.logger.info("Replayed dispense %s item %s for %s (remain %s)",
                         request_id, prior["item_index"], slot.display_name(), prior["remain_after"])
        return DoseOutcome(prior["remain_after"], False, replayed=True)

    def apply_dose(self, slot: MachineSlot, dose: int, request_id: Optional[str] = None,
                   item_index: int = 0) -> DoseOutcome:
        """Decrement ``slot`` by ``dose``; raises InsufficientStock without mutating when short.

        With a request_id, the item at ``item_index`` of that request is applied
        at most once: a repeat returns its recorded outcome (replayed=True) and
        leaves stock untouched, including when two calls race on the same item.
        """
        if dose < 0:
            raise ValueError(f"dose must be >= 0, got {dose}")

        try:
            with self.database.transaction("dose application") as conn:
                if request_id:
                    prior = self.dispense_log.find(request_id, slot.owner, slot.medi_id, item_index, conn=conn)
                    if prior is not None:
                        return self._replayed(request_id, slot, prior)

                if not slot.can_dispense(dose):
                    raise InsufficientStock(slot.medi_id, slot.remain, dose, slot.medicine_name or None)

                remaining = self.machines.decrement(slot, dose, conn=conn)
                if remaining is None:
                    # Lost a race: another caller drained the slot since it was read
                    current = self.machines.current_remain(slot, conn=conn)
                    raise InsufficientStock(slot.medi_id, slot.remain if current is None else current, dose,
                                            slot.medicine_name or None)

                warning_triggered = False
                if remaining <= self.threshold:
                    warning_triggered = self.medications.raise_warning(slot.owner, slot.medi_id, conn=conn)

                if request_id and not self.dispense_log.record(request_id, slot.owner, slot.medi_id, item_index,
                                                               dose, remaining, warning_triggered, conn=conn):
                    # Rolls back this item's decrement
                    raise _AlreadyRecorded()
        except _AlreadyRecorded:
            prior = self.dispense_log.find(request_id, slot.owner, slot.medi_id, item_index)
            return self._replayed(request_id, slot, prior)

        slot.remain = remaining
        slot.warning = slot.warning or warning_triggered
        self.logger.info("Dispensed %s x%s from %s (remain %s)",
                         slot.display_name(), dose, slot.machine_id, remaining)
        if remaining <= self.threshold:
            self.logger.warning("Low stock: %s has %s left (threshold %s)",
                                slot.display_name(), remaining, self.threshold)
        if warning_triggered:
            publish_low_stock(slot, remaining, self.threshold, bus=self.event_bus)
        return DoseOutcome(remaining, warning_triggered)

    def low_stock(self, group_id: str) -> List[MachineSlot]:
        """Slots at or under the threshold, or whose medication is already flagged."""
        low = [s for s in self.machines.list_for_group(group_id) if s.warning or s.remain <= self.threshold]
        low.sort(key=lambda s: (s.remain, s.display_name()))
        return low
