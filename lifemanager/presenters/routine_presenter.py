from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from config import Urgency
from formatters import (
    CountdownUnit,
    format_countdown_units,
    format_interval,
    format_relative_future,
    format_relative_past,
)
from models.entities import TaskInstance
from services.progress import (
    display_progress,
    is_overdue_progress,
    remaining_percent,
    task_progress,
)
from services.stats import RoutineStats

_STATUS_COPY = {
    Urgency.OVERDUE: ("This routine is overdue!", "Consider completing or rescheduling it."),
    Urgency.IMMINENT: ("Almost time!", "Get ready to complete this routine."),
    Urgency.TODAY: ("Coming up today!", "Make sure you're prepared."),
    Urgency.WEEK: ("This week", "You have time to plan ahead."),
}


@dataclass
class RoutineDisplayData:
    """Computed display data for a routine instance, separating logic from presentation."""
    title: str
    due_at: datetime
    time_text: str
    countdown_units: List[CountdownUnit]
    progress: float
    display_progress: float
    remaining_percent: float
    is_overdue: bool
    urgency: Urgency
    status_title: str
    status_subtitle: str
    progress_start: datetime


@dataclass
class RoutineSummaryData:
    """Numbers and labels for a routine's card in the routines list."""
    completed_text: str
    interval_text: str
    last_done_text: Optional[str]
    next_text: Optional[str]


class RoutinePresenter:
    """Computes display values for routines without rendering."""

    @staticmethod
    def urgency(remaining: timedelta) -> Urgency:
        if remaining < timedelta(0):
            return Urgency.OVERDUE
        if remaining < timedelta(hours=1):
            return Urgency.IMMINENT
        if remaining < timedelta(hours=24):
            return Urgency.TODAY
        if remaining < timedelta(days=7):
            return Urgency.WEEK
        return Urgency.LATER

    @staticmethod
    def status_copy(remaining: timedelta) -> tuple:
        """Title and subtitle for the countdown sheet header."""
        level = RoutinePresenter.urgency(remaining)
        if level in _STATUS_COPY:
            return _STATUS_COPY[level]
        if remaining < timedelta(days=30):
            return "Coming up soon", "Plenty of time to prepare."
        return "Scheduled ahead", "Plenty of time to prepare."

    @staticmethod
    def time_text(task: TaskInstance, now: datetime) -> str:
        """Timeline wording: countdown for pending instances, elapsed time otherwise."""
        if task.is_pending:
            return format_relative_future(task.due_at, now)
        return format_relative_past(task.completed_at or task.due_at, now)

    @staticmethod
    def build(task: TaskInstance, now: datetime) -> RoutineDisplayData:
        """Build display data for an upcoming routine instance."""
        remaining = task.due_at - now
        progress = task_progress(task, now)
        title, subtitle = RoutinePresenter.status_copy(remaining)
        return RoutineDisplayData(
            title=task.title,
            due_at=task.due_at,
            time_text=RoutinePresenter.time_text(task, now),
            countdown_units=format_countdown_units(remaining),
            progress=progress,
            display_progress=display_progress(progress),
            remaining_percent=remaining_percent(progress),
            is_overdue=is_overdue_progress(progress) or task.is_overdue(now),
            urgency=RoutinePresenter.urgency(remaining),
            status_title=title,
            status_subtitle=subtitle,
            progress_start=task.effective_progress_start(now),
        )

    @staticmethod
    def summarize(stats: RoutineStats, now: datetime) -> RoutineSummaryData:
        """Labels for the routines list card."""
        return RoutineSummaryData(
            completed_text=f"{stats.completed}x",
            interval_text=format_interval(stats.average_interval),
            last_done_text=(
                format_relative_past(stats.last_completed_at, now)
                if stats.last_completed_at else None
            ),
            next_text=(
                format_relative_future(stats.next_scheduled_at, now)
                if stats.next_scheduled_at else None
            ),
        )
