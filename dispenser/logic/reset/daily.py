"""Daily reset of every member's taken-today marker.

reset_taken_today() is the job itself: one bulk update, failures logged and
swallowed (a missed reset corrects itself the next day). DailyResetScheduler
runs it in-process on a background thread; ``dispenser-reset`` (main below)
runs it once from an external scheduler such as cron.
"""
from __future__ import annotations
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from dispenser.events.Event_Bus import EventBus
from dispenser.events.event_helpers import publish_daily_reset
from dispenser.infra.Member_Repository import MemberRepository
from dispenser.logic.clock.resolver import ClockResolver
from dispenser.utilities.config import DAILY_RESET_HOUR

logger = logging.getLogger(__name__)

__all__ = ["reset_taken_today", "seconds_until_next_run", "DailyResetScheduler", "main"]


def reset_taken_today(members: MemberRepository, event_bus: Optional[EventBus] = None) -> Optional[int]:
    """Set took_today = 0 for all members. Returns rows affected, or None when the reset failed."""
    logger.info("[daily reset] clearing taken-today markers")
    try:
        affected = members.reset_all_taken_today()
    except Exception:
        logger.exception("[daily reset] failed")
        return None
    logger.info("[daily reset] done - %s member(s)", affected)
    publish_daily_reset(affected, bus=event_bus)
    return affected


def seconds_until_next_run(now: datetime, hour: int) -> float:
    """Seconds from ``now`` to the next occurrence of ``hour``:00 (a full day if it is exactly now)."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class DailyResetScheduler:
    def __init__(self, run: Callable[[], object], clock: Optional[ClockResolver] = None,
                 hour: int = DAILY_RESET_HOUR):
        if not 0 <= hour <= 23:
            raise ValueError(f"hour must be within 0..23, got {hour}")
        self._run = run
        self._clock = clock or ClockResolver()
        self._hour = hour
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="DailyResetScheduler", daemon=True)
        self._thread.start()
        logger.info("DailyResetScheduler: started (hour=%02d:00)", self._hour)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("DailyResetScheduler: stopped")

    def _run_loop(self) -> None:
        """Sleep until the reset hour -> run -> repeat."""
        while not self._stop_event.is_set():
            delay = seconds_until_next_run(self._clock.now(), self._hour)
            if self._stop_event.wait(timeout=delay):
                break
            try:
                self._run()
            except Exception:
                logger.exception("DailyResetScheduler: reset failed")


def main() -> int:
    """Run one reset against DATABASE_URL (for cron or a one-off job)."""
    from dispenser.infra.database import Database
    from dispenser.utilities.config import LOG_LEVEL

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    database = Database()
    try:
        reset_taken_today(MemberRepository(database))
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
