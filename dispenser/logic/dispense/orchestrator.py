"""Dispense orchestration: what a member's device should dispense, and what it reports back.

handle_dispense_result() is best effort per item: an unknown or short
medication never stops the rest of the list. Items are applied strictly in
the order received, one at a time.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from dispenser.domain.Member import Member
from dispenser.domain.errors import InsufficientStock, NotFound, UnknownMedicationAtDevice
from dispenser.events.Event_Bus import EventBus
from dispenser.events.event_helpers import publish_insufficient
from dispenser.infra.Medication_Repository import MedicationRepository
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.logic.inventory.ledger import InventoryLedger
from dispenser.logic.schedule.audience import is_recipient, is_within_validity
from dispenser.logic.schedule.index import ScheduleIndex
from dispenser.utilities.config import DISPENSE_TIMEOUT_SECONDS
from dispenser.utilities.constants import STATUS_COMPLETED, STATUS_TIMEOUT, TIME_SLOTS

__all__ = ["DispenseOrchestrator", "summarize"]


def _item_fields(item: Any) -> Tuple[str, int]:
    """(medi_id, dose) from a mapping, an object with attributes, or a pair."""
    if isinstance(item, dict):
        return str(item["medi_id"]), int(item["dose"])
    if hasattr(item, "medi_id"):
        return str(item.medi_id), int(item.dose)
    medi_id, dose = item
    return str(medi_id), int(dose)


def summarize(processed: List[str], insufficient: List[str], pending: Optional[List[str]] = None) -> str:
    message = f"{len(processed)} medication(s) dispensed"
    if insufficient:
        message += f", {len(insufficient)} insufficient"
    if pending:
        message += f", {len(pending)} not processed before timeout"
    return message


class DispenseOrchestrator:
    def __init__(self, members: MemberRepository, ledger: InventoryLedger, schedule_index: ScheduleIndex,
                 medications: MedicationRepository, clock: Optional[ClockResolver] = None,
                 event_bus: Optional[EventBus] = None, timeout: float = DISPENSE_TIMEOUT_SECONDS,
                 monotonic: Callable[[], float] = time.monotonic, logger: Optional[logging.Logger] = None):
        self.members = members
        self.ledger = ledger
        self.schedule_index = schedule_index
        self.medications = medications
        self.clock = clock or ClockResolver()
        self.event_bus = event_bus
        self.timeout = timeout
        self._monotonic = monotonic
        self.logger = logger or logging.getLogger(__name__)

    # --- Member resolution -------------------------------------------------
    def resolve_member(self, uid: str) -> Member:
        '''Member by RFID token, falling back to the shared device id; must belong to a household.'''
        member = self.members.find_by_token(uid) or self.members.find_by_device(uid)
        if member is None:
            self.logger.warning("Dispense report from unregistered uid %s", uid)
            raise NotFound("Unregistered user")
        if not member.connect:
            raise NotFound(f"Member {member.user_id} is not linked to a household")
        return member

    # --- Device report -----------------------------------------------------
    def handle_dispense_result(self, uid: str, items: Iterable[Any],
                               request_id: Optional[str] = None) -> Dict[str, Any]:
        member = self.resolve_member(uid)
        group_id = member.connect
        pairs = [_item_fields(item) for item in items]
        deadline = self._monotonic() + self.timeout if self.timeout else None

        processed: List[str] = []
        insufficient: List[str] = []
        pending: List[str] = []

        for index, (medi_id, dose) in enumerate(pairs):
            if deadline is not None and self._monotonic() > deadline:
                pending = [m for m, _ in pairs[index:]]
                self.logger.warning("Dispense report for %s timed out; %d item(s) not applied: %s",
                                    group_id, len(pending), pending)
                break
            try:
                slot = self.ledger.require_slot(group_id, medi_id)
            except UnknownMedicationAtDevice as e:
                self.logger.warning("%s; skipped", e)
                continue
            try:
                self.ledger.apply_dose(slot, dose, request_id=request_id, item_index=index)
            except InsufficientStock as e:
                self.logger.warning("Insufficient stock - %s (%s < %s)",
                                    slot.display_name(), e.remaining, e.requested)
                insufficient.append(slot.display_name())
                publish_insufficient(slot, e.remaining, e.requested, bus=self.event_bus)
                continue
            processed.append(slot.display_name())

        result: Dict[str, Any] = {
            "status": STATUS_TIMEOUT if pending else STATUS_COMPLETED,
            "processed": processed,
            "insufficient": insufficient,
            "message": summarize(processed, insufficient, pending),
        }
        if pending:
            result["pending"] = pending
        return result

    # --- What to dispense next ---------------------------------------------
    def resolve_dispense_candidates(self, token_uid: str) -> List[Dict[str, Any]]:
        member = self.members.find_by_token(token_uid)
        if member is None:
            self.logger.warning("Dispense list requested for unregistered token %s", token_uid)
            raise NotFound("Unregistered user")

        day = self.clock.current_day_of_week()
        slots = self.clock.remaining_time_slots_today()
        today = self.clock.today()
        entries = self.schedule_index.due_for_member_across_slots(member.user_id, day, slots)

        medications: Dict[Tuple[str, str], Any] = {}
        for connect in {e.connect for e in entries}:
            for medi_id, med in self.medications.get_many(connect, [e.medi_id for e in entries]).items():
                medications[(connect, medi_id)] = med

        candidates = []
        for entry in sorted(entries, key=lambda e: TIME_SLOTS.index(e.time_of_day)):
            med = medications.get((entry.connect, entry.medi_id))
            if not is_recipient(entry, med, member.user_id):
                continue
            if not is_within_validity(med, today):
                continue
            candidates.append({
                "medi_id": entry.medi_id,
                "medicine_name": entry.medicine_name,
                "dose": entry.dose,
                "time_of_day": entry.time_of_day,
            })
        self.logger.info("Dispense list for %s: %d candidate(s) for %s %s",
                         member.name, len(candidates), day, slots)
        return candidates
