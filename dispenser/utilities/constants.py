from typing import Final

DAYS_OF_WEEK: Final[tuple[str, ...]] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
TIME_SLOTS: Final[tuple[str, ...]] = ("morning", "afternoon", "evening")
UNKNOWN_SLOT: Final[str] = "unknown"

# Slot boundaries (hour of day, lower bound inclusive)
AFTERNOON_STARTS_AT: Final[int] = 12
EVENING_STARTS_AT: Final[int] = 18

LOW_STOCK_THRESHOLD: Final[int] = 5
DEFAULT_MAX_SLOT: Final[int] = 3

# Dispense result statuses
STATUS_COMPLETED: Final[str] = "completed"
STATUS_TIMEOUT: Final[str] = "timeout"
