"""Schedule repository: weekday/slot lookups enriched with medication and member names."""
from typing import Iterable, List, Optional

import sqlalchemy

from dispenser.domain.ScheduleEntry import ScheduleEntry
from dispenser.infra.database import Database, medicine, schedule, users

_JOIN = (schedule
         .outerjoin(medicine, sqlalchemy.and_(medicine.c.medi_id == schedule.c.medi_id,
                                              medicine.c.connect == schedule.c.connect))
         .outerjoin(users, users.c.user_id == schedule.c.user_id))
_COLUMNS = [
    schedule,
    medicine.c.name.label("medicine_name"),
    users.c.name.label("user_name"),
    users.c.role.label("user_role"),
]


class ScheduleRepository:
    def __init__(self, database: Database):
        self.database = database

    def add(self, entry: ScheduleEntry, conn=None) -> ScheduleEntry:
        values = {k: getattr(entry, k) for k in ("schedule_id", "connect", "user_id", "medi_id",
                                                  "day_of_week", "time_of_day", "dose")}
        if entry.created_at is not None:
            values["created_at"] = entry.created_at
        with self.database.use(conn, "schedule insert") as c:
            c.execute(schedule.insert().values(**values))
        return entry

    def find(self, day_of_week: str, *, connect: Optional[str] = None, user_id: Optional[str] = None,
             slots: Optional[Iterable[str]] = None) -> List[ScheduleEntry]:
        '''Entries for one weekday, filtered by household and/or member and by slot set.

        slots=None means every slot (including entries with no slot).
        '''
        if connect is None and user_id is None:
            raise ValueError("find() needs a household or a member")
        conditions = [schedule.c.day_of_week == day_of_week]
        if connect is not None:
            conditions.append(schedule.c.connect == connect)
        if user_id is not None:
            conditions.append(schedule.c.user_id == user_id)
        if slots is not None:
            slot_list = list(slots)
            if not slot_list:
                return []
            conditions.append(schedule.c.time_of_day.in_(slot_list))
        query = (sqlalchemy.select(*_COLUMNS).select_from(_JOIN)
                 .where(*conditions)
                 .order_by(schedule.c.created_at, schedule.c.schedule_id))
        with self.database.use(None, "schedule lookup") as c:
            return [ScheduleEntry.from_dict(row) for row in c.execute(query).mappings()]
