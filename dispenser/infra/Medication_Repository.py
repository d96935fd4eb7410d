"""Medication repository; every call is scoped by household-group id."""
from typing import List, Optional

import sqlalchemy

from dispenser.domain.Medication import Medication
from dispenser.infra.database import Database, medicine


class MedicationRepository:
    def __init__(self, database: Database):
        self.database = database

    def add(self, medication: Medication, conn=None) -> Medication:
        values = medication.to_dict()
        values["start_date"] = medication.start_date
        values["end_date"] = medication.end_date
        with self.database.use(conn, "medication insert") as c:
            c.execute(medicine.insert().values(**values))
        return medication

    def get(self, connect: str, medi_id: str, conn=None) -> Optional[Medication]:
        query = sqlalchemy.select(medicine).where(medicine.c.connect == connect, medicine.c.medi_id == medi_id)
        with self.database.use(conn, "medication lookup") as c:
            row = c.execute(query).mappings().first()
        return Medication.from_dict(row) if row else None

    def list_for_group(self, connect: str) -> List[Medication]:
        query = sqlalchemy.select(medicine).where(medicine.c.connect == connect).order_by(medicine.c.medi_id)
        with self.database.use(None, "medication listing") as c:
            return [Medication.from_dict(row) for row in c.execute(query).mappings()]

    def get_many(self, connect: str, medi_ids) -> dict:
        '''Medications of one household keyed by medi_id.'''
        ids = sorted({m for m in medi_ids if m})
        if not ids:
            return {}
        query = sqlalchemy.select(medicine).where(medicine.c.connect == connect, medicine.c.medi_id.in_(ids))
        with self.database.use(None, "medication lookup") as c:
            return {row["medi_id"]: Medication.from_dict(row) for row in c.execute(query).mappings()}

    def raise_warning(self, connect: str, medi_id: str, conn=None) -> bool:
        '''Sets the low-stock flag; True only when it flipped from false to true.'''
        stmt = (medicine.update()
                .where(medicine.c.connect == connect,
                       medicine.c.medi_id == medi_id,
                       medicine.c.warning == sqlalchemy.false())
                .values(warning=True))
        with self.database.use(conn, "low-stock warning update") as c:
            return c.execute(stmt).rowcount == 1
