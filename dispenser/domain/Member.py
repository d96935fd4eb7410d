"""Member domain entity: household member identified by an RFID token and a shared device id."""
from typing import Optional


class Member:
    def __init__(self, user_id: str = "", name: str = "", role: str = "child", connect: Optional[str] = None,
                 m_uid: Optional[str] = None, k_uid: Optional[str] = None, took_today: int = 0,
                 age: Optional[int] = None, birth_date: Optional[str] = None):
        self.user_id = user_id
        self.name = name
        self.role = role
        self.connect = connect
        self.m_uid = m_uid
        self.k_uid = k_uid
        self.took_today = int(took_today or 0)
        self.age = age
        self.birth_date = birth_date

    @property
    def has_taken_today(self) -> bool:
        return self.took_today == 1

    def __str__(self) -> str:
        return f"{self.name} ({self.role}) - household {self.connect or '-'}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates a Member from a row mapping. Ignores unknown keys.'''
        d = dict(data) if data else {}
        allowed = {"user_id", "name", "role", "connect", "m_uid", "k_uid", "took_today", "age", "birth_date"}
        return Member(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role,
            "connect": self.connect,
            "m_uid": self.m_uid,
            "k_uid": self.k_uid,
            "took_today": self.took_today,
            "age": self.age,
            "birth_date": self.birth_date,
        }

    def public_summary(self):
        '''Fields returned to a device after a successful token check.'''
        return {"user_id": self.user_id, "name": self.name, "role": self.role, "connect": self.connect}
