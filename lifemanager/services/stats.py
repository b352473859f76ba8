import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Any

from config import TimelineKind
from models.entities import RoutineGroup, TaskInstance
from services.progress import (
    average_interval,
    completion_dates,
    current_streak,
    longest_streak,
)


@dataclass
class RoutineStats:
    """Read-only aggregates for one routine group, recomputed on demand."""
    total: int
    completed: int
    skipped: int
    upcoming: int
    completion_rate: float  # percentage of all instances
    average_interval: float  # days between completions
    last_completed_at: Optional[datetime]
    next_task: Optional[TaskInstance]
    next_scheduled_at: Optional[datetime]
    has_time: bool
    current_streak: int
    longest_streak: int
    total_points: int


@dataclass
class TimelineItem:
    """One row of the routine timeline."""
    kind: TimelineKind
    date: datetime
    task: TaskInstance


def routine_group(tasks: Iterable[TaskInstance], group_id: str) -> RoutineGroup:
    """Collect a routine's instances, most recent due date first.

    The group root (a routine whose own id is the group id) is included even
    though its ``routine_group_id`` may be unset.
    """
    members = [
        t for t in tasks
        if t.routine_group_id == group_id or (t.is_routine and t.id == group_id)
    ]
    members.sort(key=lambda t: t.due_date, reverse=True)
    return RoutineGroup(group_id=group_id, instances=members)


def pick_routine_representatives(tasks: Iterable[TaskInstance]) -> List[TaskInstance]:
    """One instance per routine for the routines list, sorted by title.

    Pending instances win over resolved ones; between equal statuses the
    later due date wins.
    """
    chosen: Dict[str, TaskInstance] = {}
    for task in tasks:
        if not task.is_routine_task:
            continue
        group_id = task.effective_group_id
        existing = chosen.get(group_id)
        if existing is None:
            chosen[group_id] = task
        elif task.is_pending and not existing.is_pending:
            chosen[group_id] = task
        elif task.status == existing.status and task.due_date > existing.due_date:
            chosen[group_id] = task
    return sorted(chosen.values(), key=lambda t: t.title)


def _resolved_at(task: TaskInstance) -> datetime:
    """When an instance was resolved, falling back to its due time."""
    return task.completed_at or task.due_at


def _history_most_recent_first(group: RoutineGroup) -> List[TaskInstance]:
    resolved = [t for t in group.instances if not t.is_pending]
    return sorted(resolved, key=_resolved_at, reverse=True)


class RoutineStatsService:
    """Service for calculating routine statistics."""

    def calculate(self, group: RoutineGroup, now: datetime) -> RoutineStats:
        """Calculate the statistics shown on a routine's overview."""
        total = len(group.instances)
        completed = group.completed
        skipped = group.skipped
        upcoming = [t for t in group.pending if t.due_at > now]

        dates = completion_dates(group.instances)
        last_completed_at = dates[-1] if dates else None

        pending = sorted(group.pending, key=lambda t: t.due_date)
        next_task = pending[0] if pending else None
        next_scheduled_at = next_task.due_at if next_task else None

        history = _history_most_recent_first(group)

        return RoutineStats(
            total=total,
            completed=len(completed),
            skipped=len(skipped),
            upcoming=len(upcoming),
            completion_rate=(len(completed) / total * 100) if total else 0.0,
            average_interval=average_interval(dates),
            last_completed_at=last_completed_at,
            next_task=next_task,
            next_scheduled_at=next_scheduled_at,
            has_time=next_task is not None and next_task.due_time is not None,
            current_streak=current_streak(history),
            longest_streak=longest_streak(history),
            total_points=sum(t.points_earned for t in group.instances),
        )

    def build_timeline(self, group: RoutineGroup) -> List[TimelineItem]:
        """Upcoming instances (soonest first) followed by history (newest first)."""
        upcoming = sorted(group.pending, key=lambda t: t.due_at)
        items = [TimelineItem(TimelineKind.UPCOMING, t.due_at, t) for t in upcoming]
        for task in _history_most_recent_first(group):
            kind = TimelineKind.COMPLETED if task.is_completed else TimelineKind.SKIPPED
            items.append(TimelineItem(kind, _resolved_at(task), task))
        return items

    def calendar_marks(self, group: RoutineGroup) -> Dict[date, TimelineKind]:
        """Map each day to the status shown on the routine calendar.

        Completions are marked on the day they happened; a completion wins
        over a skip or an upcoming instance on the same day.
        """
        priority = {TimelineKind.COMPLETED: 0, TimelineKind.SKIPPED: 1, TimelineKind.UPCOMING: 2}
        marks: Dict[date, TimelineKind] = {}
        for item in self.build_timeline(group):
            day = item.date.date()
            existing = marks.get(day)
            if existing is None or priority[item.kind] < priority[existing]:
                marks[day] = item.kind
        return marks

    def export_to_json(self, group: RoutineGroup, now: datetime) -> str:
        """Export a routine's statistics and history to JSON."""
        stats = self.calculate(group, now)
        export_data: Dict[str, Any] = {
            "export_date": now.isoformat(),
            "routine": {
                "group_id": group.group_id,
                "title": group.title,
            },
            "stats": {
                "total": stats.total,
                "completed": stats.completed,
                "skipped": stats.skipped,
                "upcoming": stats.upcoming,
                "completion_rate_percent": round(stats.completion_rate, 2),
                "average_interval_days": round(stats.average_interval, 2),
                "last_completed_at": (
                    stats.last_completed_at.isoformat() if stats.last_completed_at else None
                ),
                "next_scheduled_at": (
                    stats.next_scheduled_at.isoformat() if stats.next_scheduled_at else None
                ),
                "current_streak": stats.current_streak,
                "longest_streak": stats.longest_streak,
                "total_points": stats.total_points,
            },
            "timeline": [
                {
                    "kind": item.kind.value,
                    "date": item.date.isoformat(),
                    "task_id": item.task.id,
                }
                for item in self.build_timeline(group)
            ],
            "instances": [t.to_dict() for t in group.instances],
        }
        return json.dumps(export_data, indent=2, ensure_ascii=False)


# Singleton instance
stats_service = RoutineStatsService()
