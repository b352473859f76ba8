"""Progress arithmetic for routine countdowns.

The raw fraction returned by progress_fraction() grows past 1.0 once an
instance is overdue. Bars draw display_progress(), which caps at 1.0, while
overdue checks use is_overdue_progress() on the raw value.
"""
from datetime import date, datetime, time
from typing import Iterable, List, Sequence, Union

from config import DISPLAY_PROGRESS_MAX, SECONDS_PER_DAY
from models.entities import TaskInstance


def progress_fraction(start: datetime, due: datetime, now: datetime) -> float:
    """Elapsed share of the start->due window, floored at 0 and uncapped.

    A window of zero or negative length counts as already due.
    """
    total = (due - start).total_seconds()
    if total <= 0:
        return 1.0
    elapsed = (now - start).total_seconds()
    return max(0.0, elapsed / total)


def display_progress(fraction: float) -> float:
    return min(max(fraction, 0.0), DISPLAY_PROGRESS_MAX)


def is_overdue_progress(fraction: float) -> bool:
    return fraction > 1.0


def remaining_percent(fraction: float) -> float:
    """Share of the window still left, 0-100, for the "N% left" label."""
    return (1.0 - display_progress(fraction)) * 100


def task_progress(task: TaskInstance, now: datetime) -> float:
    """Raw progress of a task instance from its progress start to its due time."""
    return progress_fraction(task.effective_progress_start(now), task.due_at, now)


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _gap_days(earlier: datetime, later: datetime) -> int:
    return int((later - earlier).total_seconds() // SECONDS_PER_DAY)


def average_interval(dates: Sequence[Union[date, datetime]]) -> float:
    """Mean gap in whole days between consecutive completion dates.

    Dates are sorted first; fewer than two dates give 0.0.
    """
    if len(dates) < 2:
        return 0.0
    ordered = sorted(_as_datetime(d) for d in dates)
    total = sum(_gap_days(a, b) for a, b in zip(ordered, ordered[1:]))
    return total / (len(ordered) - 1)


def current_streak(tasks: Iterable[TaskInstance]) -> int:
    """Count completed instances from the most recent backwards.

    ``tasks`` must be ordered most recent first; the first instance that is
    not completed ends the streak.
    """
    streak = 0
    for task in tasks:
        if not task.is_completed:
            break
        streak += 1
    return streak


def longest_streak(tasks: Iterable[TaskInstance]) -> int:
    best = 0
    run = 0
    for task in tasks:
        if task.is_completed:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def completion_dates(tasks: Iterable[TaskInstance]) -> List[datetime]:
    """Completion timestamps of completed instances, oldest first."""
    return sorted(t.completed_at for t in tasks if t.is_completed and t.completed_at is not None)
