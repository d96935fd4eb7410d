"""Machine slot repository: stock rows joined with their household medication."""
from typing import List, Optional

import sqlalchemy

from dispenser.domain.MachineSlot import MachineSlot
from dispenser.infra.database import Database, machine, medicine

# Medication rows join on (medi_id, owner == connect), never medi_id alone
_JOIN = machine.outerjoin(
    medicine,
    sqlalchemy.and_(medicine.c.medi_id == machine.c.medi_id, medicine.c.connect == machine.c.owner),
)
_COLUMNS = [
    machine,
    medicine.c.name.label("medicine_name"),
    sqlalchemy.func.coalesce(medicine.c.warning, sqlalchemy.false()).label("warning"),
]


class MachineRepository:
    def __init__(self, database: Database):
        self.database = database

    def add(self, slot: MachineSlot, conn=None) -> MachineSlot:
        if not 0 <= slot.remain <= slot.total:
            raise ValueError(f"remain must be within 0..total, got {slot.remain}/{slot.total}")
        values = {k: getattr(slot, k) for k in ("machine_id", "medi_id", "owner", "total", "remain",
                                                 "slot", "max_slot", "error_status", "last_error_at")}
        with self.database.use(conn, "machine slot insert") as c:
            c.execute(machine.insert().values(**values))
        return slot

    def find_slot(self, owner: str, medi_id: str, conn=None) -> Optional[MachineSlot]:
        query = (sqlalchemy.select(*_COLUMNS).select_from(_JOIN)
                 .where(machine.c.owner == owner, machine.c.medi_id == medi_id)
                 .order_by(machine.c.machine_id)
                 .limit(1))
        with self.database.use(conn, "machine slot lookup") as c:
            row = c.execute(query).mappings().first()
        return MachineSlot.from_dict(row) if row else None

    def list_for_group(self, owner: str) -> List[MachineSlot]:
        query = (sqlalchemy.select(*_COLUMNS).select_from(_JOIN)
                 .where(machine.c.owner == owner)
                 .order_by(machine.c.slot, machine.c.medi_id))
        with self.database.use(None, "machine slot listing") as c:
            return [MachineSlot.from_dict(row) for row in c.execute(query).mappings()]

    def decrement(self, slot: MachineSlot, dose: int, conn=None) -> Optional[int]:
        '''Conditional decrement; returns the new remain, or None when stock was short at write time.'''
        key = (machine.c.machine_id == slot.machine_id,
               machine.c.medi_id == slot.medi_id,
               machine.c.owner == slot.owner)
        stmt = (machine.update()
                .where(*key, machine.c.remain >= dose)
                .values(remain=machine.c.remain - dose))
        with self.database.use(conn, "stock decrement") as c:
            if c.execute(stmt).rowcount != 1:
                return None
            return c.execute(sqlalchemy.select(machine.c.remain).where(*key)).scalar_one()

    def current_remain(self, slot: MachineSlot, conn=None) -> Optional[int]:
        query = sqlalchemy.select(machine.c.remain).where(machine.c.machine_id == slot.machine_id,
                                                          machine.c.medi_id == slot.medi_id,
                                                          machine.c.owner == slot.owner)
        with self.database.use(conn, "stock lookup") as c:
            return c.execute(query).scalar_one_or_none()
