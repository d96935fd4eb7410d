"""Clock resolver: maps wall-clock time to the weekday code and dosing slots.

Pure helpers take an hour or a date; ClockResolver wraps an injectable
``now_fn`` so callers (and tests) control what "now" is.
"""
from __future__ import annotations
from datetime import date, datetime, tzinfo
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from dispenser.utilities.constants import AFTERNOON_STARTS_AT, DAYS_OF_WEEK, EVENING_STARTS_AT, TIME_SLOTS

__all__ = ["time_of_day_for_hour", "remaining_slots_for_hour", "day_of_week_for", "ClockResolver"]

NowFn = Callable[[], datetime]


def _check_hour(hour: int) -> int:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be within 0..23, got {hour}")
    return hour


def time_of_day_for_hour(hour: int) -> str:
    """morning before 12, afternoon from 12 until 18, evening from 18."""
    _check_hour(hour)
    if hour < AFTERNOON_STARTS_AT:
        return "morning"
    if hour < EVENING_STARTS_AT:
        return "afternoon"
    return "evening"


def remaining_slots_for_hour(hour: int) -> List[str]:
    """Current slot followed by every later slot of the day, chronological."""
    current = time_of_day_for_hour(hour)
    return list(TIME_SLOTS[TIME_SLOTS.index(current):])


def day_of_week_for(day: date) -> str:
    return DAYS_OF_WEEK[day.weekday()]


class ClockResolver:
    def __init__(self, now_fn: Optional[NowFn] = None, tz: str | tzinfo | None = None):
        self._tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self._now_fn = now_fn

    def now(self) -> datetime:
        if self._now_fn is not None:
            current = self._now_fn()
        elif self._tz is not None:
            return datetime.now(self._tz)
        else:
            return datetime.now()
        if self._tz is not None and current.tzinfo is not None:
            current = current.astimezone(self._tz)
        return current

    def today(self) -> date:
        return self.now().date()

    def current_day_of_week(self) -> str:
        return day_of_week_for(self.now())

    def current_time_of_day(self) -> str:
        return time_of_day_for_hour(self.now().hour)

    def remaining_time_slots_today(self) -> List[str]:
        return remaining_slots_for_hour(self.now().hour)

    @classmethod
    def fixed(cls, moment: datetime) -> "ClockResolver":
        """Clock frozen at ``moment`` (tests, replays)."""
        return cls(now_fn=lambda: moment)
