"""MachineSlot domain entity: stock of one medication loaded into one slot of a device."""
from typing import Optional
from dispenser.utilities.constants import DEFAULT_MAX_SLOT


class MachineSlot:
    def __init__(self, machine_id: str = "", medi_id: str = "", owner: str = "", total: int = 0,
                 remain: int = 0, slot: Optional[int] = None, max_slot: int = DEFAULT_MAX_SLOT,
                 error_status: Optional[str] = None, last_error_at=None, medicine_name: str = "",
                 warning: bool = False):
        self.machine_id = machine_id
        self.medi_id = medi_id
        self.owner = owner
        self.total = int(total or 0)
        self.remain = int(remain or 0)
        self.slot = slot
        self.max_slot = max_slot or DEFAULT_MAX_SLOT
        self.error_status = error_status
        self.last_error_at = last_error_at
        # Joined from the household's medication row, read-only here
        self.medicine_name = medicine_name or ""
        self.warning = bool(warning)

    def can_dispense(self, dose: int) -> bool:
        return self.remain >= dose

    def usage_rate(self) -> int:
        '''Percentage of the loaded total already dispensed.'''
        if self.total <= 0:
            return 0
        return round((self.total - self.remain) / self.total * 100)

    def display_name(self) -> str:
        return self.medicine_name or self.medi_id

    def __str__(self) -> str:
        return f"Slot {self.slot}: {self.display_name()} {self.remain}/{self.total}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if data else {}
        allowed = {"machine_id", "medi_id", "owner", "total", "remain", "slot", "max_slot",
                   "error_status", "last_error_at", "medicine_name", "warning"}
        return MachineSlot(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "machine_id": self.machine_id,
            "medi_id": self.medi_id,
            "owner": self.owner,
            "total": self.total,
            "remain": self.remain,
            "slot": self.slot,
            "max_slot": self.max_slot,
            "name": self.medicine_name,
            "warning": self.warning,
        }
