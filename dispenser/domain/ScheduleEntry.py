"""ScheduleEntry domain entity: one dose of one medication on a weekday slot."""
from datetime import datetime
from typing import Optional


class ScheduleEntry:
    def __init__(self, schedule_id: str = "", connect: str = "", medi_id: str = "", day_of_week: str = "mon",
                 dose: int = 0, time_of_day: Optional[str] = None, user_id: Optional[str] = None,
                 created_at: Optional[datetime] = None, medicine_name: str = "", user_name: str = "",
                 user_role: str = ""):
        self.schedule_id = schedule_id
        self.connect = connect
        self.user_id = user_id
        self.medi_id = medi_id
        self.day_of_week = day_of_week
        self.time_of_day = time_of_day
        self.dose = int(dose or 0)
        self.created_at = created_at
        # Display fields joined at read time
        self.medicine_name = medicine_name or ""
        self.user_name = user_name or ""
        self.user_role = user_role or ""

    def __str__(self) -> str:
        who = self.user_name or self.user_id or "household"
        return f"{self.day_of_week}/{self.time_of_day or '-'}: {self.medicine_name or self.medi_id} x{self.dose} for {who}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if data else {}
        allowed = {"schedule_id", "connect", "user_id", "medi_id", "day_of_week", "time_of_day", "dose",
                   "created_at", "medicine_name", "user_name", "user_role"}
        return ScheduleEntry(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        '''Current-slot view shape.'''
        return {
            "schedule_id": self.schedule_id,
            "medi_id": self.medi_id,
            "medicine_name": self.medicine_name,
            "dose": self.dose,
            "time_of_day": self.time_of_day,
            "user_id": self.user_id,
            "user_name": self.user_name,
        }
