"""Configuration management for the dispenser service."""
import os
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

from dispenser.utilities import constants

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = BASE_DIR / 'data'

# Storage
DATABASE_URL: Final[str] = os.getenv('DATABASE_URL', f"sqlite:///{DATA_DIR / 'dispenser.db'}")

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = _env_bool('DEBUG', 'False')
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Inventory
LOW_STOCK_THRESHOLD: Final[int] = int(os.getenv('LOW_STOCK_THRESHOLD', str(constants.LOW_STOCK_THRESHOLD)))
DEFAULT_MAX_SLOT: Final[int] = int(os.getenv('DEFAULT_MAX_SLOT', str(constants.DEFAULT_MAX_SLOT)))

# Dispense processing
DISPENSE_TIMEOUT_SECONDS: Final[float] = float(os.getenv('DISPENSE_TIMEOUT_SECONDS', '10'))

# Daily reset of the "taken today" marker
DAILY_RESET_ENABLED: Final[bool] = _env_bool('DAILY_RESET_ENABLED', 'True')
DAILY_RESET_HOUR: Final[int] = int(os.getenv('DAILY_RESET_HOUR', '0'))

# Wall clock zone (IANA name); unset means server local time
DISPENSER_TIMEZONE: Final[Optional[str]] = os.getenv('DISPENSER_TIMEZONE') or None
