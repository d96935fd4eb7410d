"""Database schema and engine helpers (SQLAlchemy Core).

Every household-scoped table carries the household-group id ("connect" /
"owner") in its key, so repository lookups always filter on it explicitly.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import sqlalchemy
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from dispenser.domain.errors import TransientStorageFailure
from dispenser.utilities.config import DATABASE_URL
from dispenser.utilities.constants import DEFAULT_MAX_SLOT

logger = logging.getLogger(__name__)

metadata = sqlalchemy.MetaData()

# Household members
users = sqlalchemy.Table(
    "users",
    metadata,
    sqlalchemy.Column("user_id", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("connect", sqlalchemy.String(50), nullable=True, index=True),
    sqlalchemy.Column("m_uid", sqlalchemy.String(50), nullable=True, index=True),
    sqlalchemy.Column("k_uid", sqlalchemy.String(45), nullable=True, index=True),
    sqlalchemy.Column("name", sqlalchemy.String(100), nullable=False),
    sqlalchemy.Column("role", sqlalchemy.String(10), nullable=False, default="child"),
    sqlalchemy.Column("took_today", sqlalchemy.SmallInteger, nullable=False, default=0),
    sqlalchemy.Column("birth_date", sqlalchemy.String(255), nullable=True),
    sqlalchemy.Column("age", sqlalchemy.Integer, nullable=True),
)

# Medications, scoped per household
medicine = sqlalchemy.Table(
    "medicine",
    metadata,
    sqlalchemy.Column("medi_id", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("connect", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("name", sqlalchemy.String(100), nullable=False),
    sqlalchemy.Column("warning", sqlalchemy.Boolean, nullable=False, default=False),
    sqlalchemy.Column("start_date", sqlalchemy.Date, nullable=True),
    sqlalchemy.Column("end_date", sqlalchemy.Date, nullable=True),
    sqlalchemy.Column("target_users", sqlalchemy.JSON, nullable=True),
)

# Per-device stock of each loaded medication
machine = sqlalchemy.Table(
    "machine",
    metadata,
    sqlalchemy.Column("machine_id", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("medi_id", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("owner", sqlalchemy.String(50), nullable=False, index=True),
    sqlalchemy.Column("error_status", sqlalchemy.String(50), nullable=True),
    sqlalchemy.Column("last_error_at", sqlalchemy.DateTime, nullable=True),
    sqlalchemy.Column("total", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("remain", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("slot", sqlalchemy.SmallInteger, nullable=True),
    sqlalchemy.Column("max_slot", sqlalchemy.SmallInteger, nullable=False, default=DEFAULT_MAX_SLOT),
    sqlalchemy.CheckConstraint("remain >= 0 AND remain <= total", name="ck_machine_remain_range"),
)

# Weekly dosing plan
schedule = sqlalchemy.Table(
    "schedule",
    metadata,
    sqlalchemy.Column("schedule_id", sqlalchemy.String(50), primary_key=True),
    sqlalchemy.Column("connect", sqlalchemy.String(50), nullable=False, index=True),
    sqlalchemy.Column("user_id", sqlalchemy.String(50), nullable=True, index=True),
    sqlalchemy.Column("medi_id", sqlalchemy.String(50), nullable=True),
    sqlalchemy.Column("day_of_week", sqlalchemy.String(3), nullable=False),
    sqlalchemy.Column("time_of_day", sqlalchemy.String(10), nullable=True),
    sqlalchemy.Column("dose", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False, default=datetime.now),
)

# Applied dispense items keyed by caller request id and list position (retry de-duplication)
dispense_log = sqlalchemy.Table(
    "dispense_log",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
    sqlalchemy.Column("request_id", sqlalchemy.String(64), nullable=False),
    sqlalchemy.Column("owner", sqlalchemy.String(50), nullable=False),
    sqlalchemy.Column("medi_id", sqlalchemy.String(50), nullable=False),
    # Position of the item in the reported list; one report may repeat a medication
    sqlalchemy.Column("item_index", sqlalchemy.Integer, nullable=False, default=0),
    sqlalchemy.Column("dose", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("remain_after", sqlalchemy.Integer, nullable=False),
    sqlalchemy.Column("warning_triggered", sqlalchemy.Boolean, nullable=False, default=False),
    sqlalchemy.Column("created_at", sqlalchemy.DateTime, nullable=False, default=datetime.now),
    sqlalchemy.UniqueConstraint("request_id", "owner", "medi_id", "item_index", name="uq_dispense_log_item"),
)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Build an engine; SQLite gets thread-shareable connections (FastAPI runs sync routes in a pool)."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        in_memory = url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url
        if in_memory:
            kwargs["poolclass"] = StaticPool
        else:
            db_path = url.split("sqlite:///", 1)[-1]
            if db_path:
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return sqlalchemy.create_engine(url, echo=echo, **kwargs)
    return sqlalchemy.create_engine(url, echo=echo, pool_pre_ping=True)


@contextmanager
def storage_guard(context: str) -> Iterator[None]:
    """Convert driver/ORM errors into TransientStorageFailure, logging the original."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Storage error during %s: %s", context, e)
        raise TransientStorageFailure(context, e) from e


class Database:
    def __init__(self, url: Optional[str] = None, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url or DATABASE_URL
        self.engine = engine if engine is not None else create_db_engine(self.url, echo=echo)

    def create_all(self) -> "Database":
        with storage_guard("schema creation"):
            metadata.create_all(self.engine)
        return self

    @contextmanager
    def transaction(self, context: str) -> Iterator[Connection]:
        """One committed unit of work; rolls back on any exception raised inside."""
        with storage_guard(context):
            with self.engine.begin() as conn:
                yield conn

    @contextmanager
    def use(self, conn: Optional[Connection], context: str) -> Iterator[Connection]:
        """Join the caller's transaction when given one, otherwise open a new one."""
        if conn is None:
            with self.transaction(context) as own:
                yield own
        else:
            with storage_guard(context):
                yield conn

    def dispose(self) -> None:
        self.engine.dispose()

    def __repr__(self) -> str:
        return f"Database({self.engine.url!r})"


__all__ = ["metadata", "users", "medicine", "machine", "schedule", "dispense_log",
           "create_db_engine", "storage_guard", "Database"]
