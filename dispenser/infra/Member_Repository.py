"""Member repository: token/device lookups and the taken-today marker."""
from typing import List, Optional

import sqlalchemy

from dispenser.domain.Member import Member
from dispenser.infra.database import Database, users


class MemberRepository:
    def __init__(self, database: Database):
        self.database = database

    def add(self, member: Member, conn=None) -> Member:
        with self.database.use(conn, "member insert") as c:
            c.execute(users.insert().values(**member.to_dict()))
        return member

    def get(self, user_id: str) -> Optional[Member]:
        return self._first(users.c.user_id == user_id, "member lookup")

    def find_by_token(self, k_uid: str) -> Optional[Member]:
        '''Member carrying this RFID token, if any.'''
        if not k_uid:
            return None
        return self._first(users.c.k_uid == k_uid, "member lookup by token")

    def find_by_device(self, m_uid: str) -> Optional[Member]:
        '''First member linked to this device; every member of a household shares the value.'''
        if not m_uid:
            return None
        return self._first(users.c.m_uid == m_uid, "member lookup by device")

    def list_by_group(self, connect: str) -> List[Member]:
        query = (sqlalchemy.select(users)
                 .where(users.c.connect == connect)
                 .order_by(users.c.role, users.c.user_id))
        with self.database.use(None, "household member listing") as c:
            return [Member.from_dict(row) for row in c.execute(query).mappings()]

    def mark_taken_today(self, k_uid: str, conn=None) -> bool:
        '''Sets the marker only if it is still 0; returns True when this call set it.'''
        stmt = (users.update()
                .where(users.c.k_uid == k_uid, users.c.took_today == 0)
                .values(took_today=1))
        with self.database.use(conn, "intake confirmation") as c:
            return c.execute(stmt).rowcount == 1

    def reset_all_taken_today(self, conn=None) -> int:
        '''Bulk reset for every member; returns the number of rows matched.'''
        with self.database.use(conn, "daily reset") as c:
            return c.execute(users.update().values(took_today=0)).rowcount

    def _first(self, condition, context: str) -> Optional[Member]:
        query = sqlalchemy.select(users).where(condition).order_by(users.c.user_id).limit(1)
        with self.database.use(None, context) as c:
            row = c.execute(query).mappings().first()
        return Member.from_dict(row) if row else None
