"""Schedule index: which doses are due for a household or member on a weekday slot."""
from __future__ import annotations
from typing import Dict, Iterable, List

from dispenser.domain.ScheduleEntry import ScheduleEntry
from dispenser.infra.Schedule_Repository import ScheduleRepository
from dispenser.utilities.constants import TIME_SLOTS, UNKNOWN_SLOT

__all__ = ["ScheduleIndex", "group_by_slot"]

_SLOT_ORDER = {slot: i for i, slot in enumerate(TIME_SLOTS)}


def group_by_slot(entries: Iterable[ScheduleEntry]) -> Dict[str, List[ScheduleEntry]]:
    """Group entries by time of day, slots in chronological order, members ascending within a slot.

    Entries without a slot land under "unknown" after the evening group;
    household-wide entries (no member) come first inside their slot.
    """
    ordered = sorted(
        entries,
        key=lambda e: (_SLOT_ORDER.get(e.time_of_day, len(TIME_SLOTS)),
                       e.user_id is not None, e.user_id or ""),
    )
    grouped: Dict[str, List[ScheduleEntry]] = {}
    for entry in ordered:
        grouped.setdefault(entry.time_of_day or UNKNOWN_SLOT, []).append(entry)
    return grouped


class ScheduleIndex:
    def __init__(self, schedules: ScheduleRepository):
        self.schedules = schedules

    def due_for_group(self, group_id: str, day: str, time_of_day: str) -> List[ScheduleEntry]:
        return self.schedules.find(day, connect=group_id, slots=[time_of_day])

    def due_for_member(self, member_id: str, day: str, time_of_day: str) -> List[ScheduleEntry]:
        return self.schedules.find(day, user_id=member_id, slots=[time_of_day])

    def due_for_group_across_slots(self, group_id: str, day: str, slots: Iterable[str]) -> List[ScheduleEntry]:
        return self.schedules.find(day, connect=group_id, slots=slots)

    def due_for_member_across_slots(self, member_id: str, day: str, slots: Iterable[str]) -> List[ScheduleEntry]:
        return self.schedules.find(day, user_id=member_id, slots=slots)

    def full_day_for_group(self, group_id: str, day: str) -> Dict[str, List[ScheduleEntry]]:
        return group_by_slot(self.schedules.find(day, connect=group_id))
