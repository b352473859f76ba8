"""Application configuration - single source of truth for all constants.

Contains status enums (TaskStatus, ReminderStatus, ReminderTimerMode), the
unit lengths used by the duration formatters, tick intervals and defaults.
Import from here instead of hardcoding values elsewhere.
"""
import logging
import os
from datetime import time
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read an integer override from the environment, falling back on bad values."""
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default


class TaskStatus(Enum):
    """Lifecycle status of a task instance."""
    PENDING = "pending"
    COMPLETED = "completed"
    NOT_DONE = "not_done"


class ReminderStatus(Enum):
    PENDING = "pending"
    DONE = "done"


class ReminderTimerMode(Enum):
    """How a reminder shows its live timer."""
    NONE = "none"
    COUNTDOWN = "countdown"
    COUNTUP = "countup"


class CountdownUnitLabel(Enum):
    """Short unit labels shown under each countdown tile."""
    YEARS = "YRS"
    MONTHS = "MO"
    DAYS = "DAYS"
    HOURS = "HRS"
    MINUTES = "MIN"
    SECONDS = "SEC"


class TimelineKind(Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class Urgency(Enum):
    """Urgency bucket for an upcoming routine instance."""
    OVERDUE = "overdue"
    IMMINENT = "imminent"  # under one hour
    TODAY = "today"  # under 24 hours
    WEEK = "week"
    LATER = "later"


# Calendar approximations used by every duration formatter (not calendar-accurate)
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Missing due time means the instance is due at the end of its day
DEFAULT_DUE_TIME = time(23, 59)

# Display cap for the progress bar; the raw fraction keeps growing when overdue
DISPLAY_PROGRESS_MAX = 1.0

COUNTDOWN_TICK_SECONDS = 1.0
LIST_REFRESH_SECONDS = 60.0

REMINDER_EXPIRY_HOURS = 24

PLAN_AHEAD_DAYS = _env_int("LIFEMANAGER_PLAN_AHEAD_DAYS", 14)
QUICK_PLAN_OPTIONS = [
    {"label": "1 week", "days": 7, "months": 0},
    {"label": "2 weeks", "days": 14, "months": 0},
    {"label": "1 month", "days": 0, "months": 1},
    {"label": "3 months", "days": 0, "months": 3},
    {"label": "6 months", "days": 0, "months": 6},
]

LOG_LEVEL = os.getenv("LIFEMANAGER_LOG_LEVEL", "") or "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
