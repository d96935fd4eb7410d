"""Medication domain entity, scoped to one household (medi_id + connect)."""
from datetime import date, datetime
from typing import List, Optional


def _as_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


class Medication:
    def __init__(self, medi_id: str = "", connect: str = "", name: str = "", warning: bool = False,
                 start_date: Optional[date] = None, end_date: Optional[date] = None,
                 target_users: Optional[List[str]] = None):
        self.medi_id = medi_id
        self.connect = connect
        self.name = name
        self.warning = bool(warning)
        self.start_date = _as_date(start_date)
        self.end_date = _as_date(end_date)
        # None and [] both mean "everyone in the household"
        self.target_users = list(target_users) if target_users else None

    def __str__(self) -> str:
        parts = [f"{self.name} [{self.medi_id}@{self.connect}]"]
        if self.warning:
            parts.append("LOW STOCK")
        if self.target_users:
            parts.append("For: " + ", ".join(self.target_users))
        return " - ".join(parts)

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data) if data else {}
        allowed = {"medi_id", "connect", "name", "warning", "start_date", "end_date", "target_users"}
        return Medication(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "medi_id": self.medi_id,
            "connect": self.connect,
            "name": self.name,
            "warning": self.warning,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "target_users": self.target_users,
        }
