"""Household and device views: stock, slots, members and today's schedule."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from dispenser.domain.Member import Member
from dispenser.domain.errors import NotFound
from dispenser.infra.Machine_Repository import MachineRepository
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.logic.schedule.index import ScheduleIndex
from dispenser.utilities.config import DEFAULT_MAX_SLOT


class HouseholdStatus:
    def __init__(self, members: MemberRepository, machines: MachineRepository, schedule_index: ScheduleIndex,
                 clock: Optional[ClockResolver] = None, default_max_slot: int = DEFAULT_MAX_SLOT):
        self.members = members
        self.machines = machines
        self.schedule_index = schedule_index
        self.clock = clock or ClockResolver()
        self.default_max_slot = default_max_slot

    def _device_member(self, device_id: str) -> Member:
        member = self.members.find_by_device(device_id)
        if member is None or not member.connect:
            raise NotFound("No member is linked to this device")
        return member

    # --- Stock ---------------------------------------------------------------
    def medication_list(self, group_id: str) -> List[Dict[str, Any]]:
        return [{
            "medi_id": s.medi_id,
            "name": s.medicine_name,
            "remain": s.remain,
            "total": s.total,
            "slot": s.slot,
            "warning": s.warning,
            "machine_id": s.machine_id,
        } for s in self.machines.list_for_group(group_id)]

    def machine_status(self, device_id: str) -> Dict[str, Any]:
        member = self._device_member(device_id)
        return {
            "machine_id": device_id,
            "connect": member.connect,
            "slots": [{
                "slot": s.slot,
                "remain": s.remain,
                "total": s.total,
                "medi_id": s.medi_id,
                "name": s.medicine_name,
                "warning": s.warning,
                "usage_rate": s.usage_rate(),
            } for s in self.machines.list_for_group(member.connect)],
        }

    def slot_status(self, device_id: str) -> Dict[str, Any]:
        """Every physical slot 1..max_slot with its loaded medication, or None when empty."""
        member = self._device_member(device_id)
        loaded = self.machines.list_for_group(member.connect)
        max_slot = loaded[0].max_slot if loaded else self.default_max_slot
        by_slot = {}
        for s in loaded:
            by_slot.setdefault(s.slot, s)
        slots = []
        for number in range(1, max_slot + 1):
            s = by_slot.get(number)
            slots.append({
                "slot": number,
                "is_occupied": s is not None,
                "medicine": {
                    "medi_id": s.medi_id,
                    "name": s.medicine_name,
                    "remain": s.remain,
                    "total": s.total,
                    "warning": s.warning,
                } if s is not None else None,
            })
        return {
            "machine_id": device_id,
            "max_slot": max_slot,
            "occupied_slots": len(loaded),
            "slots": slots,
        }

    # --- Members ---------------------------------------------------------------
    def members_for_device(self, device_id: str) -> Dict[str, Any]:
        member = self._device_member(device_id)
        return {
            "connect": member.connect,
            "users": [{
                "user_id": m.user_id,
                "name": m.name,
                "role": m.role,
                "k_uid": m.k_uid,
                "took_today": m.took_today,
                "age": m.age,
            } for m in self.members.list_by_group(member.connect)],
        }

    # --- Schedules -------------------------------------------------------------
    def today_schedule_for_group(self, group_id: str) -> List[Dict[str, Any]]:
        day, slot = self.clock.current_day_of_week(), self.clock.current_time_of_day()
        return [e.to_dict() for e in self.schedule_index.due_for_group(group_id, day, slot)]

    def today_schedule_for_member(self, user_id: str) -> List[Dict[str, Any]]:
        day, slot = self.clock.current_day_of_week(), self.clock.current_time_of_day()
        return [e.to_dict() for e in self.schedule_index.due_for_member(user_id, day, slot)]

    def today_schedule_for_device(self, device_id: str) -> Dict[str, Any]:
        member = self._device_member(device_id)
        day = self.clock.current_day_of_week()
        grouped = self.schedule_index.full_day_for_group(member.connect, day)
        return {
            "connect": member.connect,
            "day_of_week": day,
            "schedules": {
                slot: [{
                    "user": {"user_id": e.user_id, "name": e.user_name, "role": e.user_role},
                    "medi_id": e.medi_id,
                    "medicine_name": e.medicine_name,
                    "dose": e.dose,
                } for e in entries]
                for slot, entries in grouped.items()
            },
        }
