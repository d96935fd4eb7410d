"""Applied dispense items per caller request id and list position."""
from typing import Optional

import sqlalchemy
from sqlalchemy.exc import IntegrityError

from dispenser.infra.database import Database, dispense_log


class DispenseLogRepository:
    def __init__(self, database: Database):
        self.database = database

    def find(self, request_id: str, owner: str, medi_id: str, item_index: int = 0, conn=None) -> Optional[dict]:
        query = sqlalchemy.select(dispense_log).where(dispense_log.c.request_id == request_id,
                                                      dispense_log.c.owner == owner,
                                                      dispense_log.c.medi_id == medi_id,
                                                      dispense_log.c.item_index == item_index)
        with self.database.use(conn, "dispense log lookup") as c:
            row = c.execute(query).mappings().first()
        return dict(row) if row else None

    def record(self, request_id: str, owner: str, medi_id: str, item_index: int, dose: int, remain_after: int,
               warning_triggered: bool, conn=None) -> bool:
        '''Inserts the log row; False when a concurrent call already recorded the same item.'''
        stmt = dispense_log.insert().values(request_id=request_id, owner=owner, medi_id=medi_id,
                                            item_index=item_index, dose=dose, remain_after=remain_after,
                                            warning_triggered=warning_triggered)
        with self.database.use(conn, "dispense log insert") as c:
            try:
                c.execute(stmt)
            except IntegrityError:
                return False
        return True
