import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Optional, List, Dict, Any

from config import (
    DEFAULT_DUE_TIME,
    REMINDER_EXPIRY_HOURS,
    ReminderStatus,
    ReminderTimerMode,
    TaskStatus,
)
from models.errors import InvalidTransitionError


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _parse_time(value: Any) -> Optional[time]:
    if value is None or isinstance(value, time):
        return value
    return time.fromisoformat(value)


def _iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class TaskInstance:
    """One occurrence of a (possibly recurring) task.

    Routine instances share a ``routine_group_id``; the first instance of a
    routine acts as the group root and may leave it unset, in which case its
    own id is the group id.
    """
    title: str
    due_date: date
    id: str = field(default_factory=_new_id)
    due_time: Optional[time] = None
    status: TaskStatus = TaskStatus.PENDING
    completed_at: Optional[datetime] = None
    not_done_reason: Optional[str] = None
    points_earned: int = 0
    progress_start_date: Optional[datetime] = None
    routine_group_id: Optional[str] = None
    postpone_count: int = 0
    created_at: Optional[datetime] = None
    is_routine: bool = False
    is_routine_active: bool = True
    category_id: Optional[str] = None
    notes: str = ""

    @property
    def due_at(self) -> datetime:
        """Due date combined with the due time, or 23:59 when no time is set."""
        return datetime.combine(self.due_date, self.due_time or DEFAULT_DUE_TIME)

    @property
    def is_routine_task(self) -> bool:
        return self.is_routine or self.routine_group_id is not None

    @property
    def effective_group_id(self) -> str:
        return self.routine_group_id or self.id

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def is_not_done(self) -> bool:
        return self.status == TaskStatus.NOT_DONE

    def effective_progress_start(self, now: datetime) -> datetime:
        """Where the countdown bar starts: explicit start, creation time, then now."""
        return self.progress_start_date or self.created_at or now

    def is_overdue(self, now: datetime) -> bool:
        """Only pending instances can be overdue."""
        if not self.is_pending:
            return False
        return self.due_at < now

    def mark_completed(self, at: datetime, points: Optional[int] = None) -> None:
        """Complete a pending instance. Completing twice keeps the first timestamp."""
        if self.is_completed:
            return
        if self.is_not_done:
            raise InvalidTransitionError(
                f"Task {self.id} is marked not done; undo the skip before completing it."
            )
        self.status = TaskStatus.COMPLETED
        self.completed_at = at
        self.not_done_reason = None
        if points is not None:
            self.points_earned = points

    def mark_not_done(self, reason: str, points: Optional[int] = None) -> None:
        if not reason or not reason.strip():
            raise InvalidTransitionError("A reason is required to mark a task as not done.")
        if self.is_completed:
            raise InvalidTransitionError(
                f"Task {self.id} is completed; undo the completion before skipping it."
            )
        self.status = TaskStatus.NOT_DONE
        self.not_done_reason = reason.strip()
        self.completed_at = None
        if points is not None:
            self.points_earned = points

    def reset_to_pending(self) -> None:
        """Undo a completion or a skip. Points earned or lost are cleared."""
        self.status = TaskStatus.PENDING
        self.completed_at = None
        self.not_done_reason = None
        self.points_earned = 0

    def validate(self) -> List[str]:
        """Return the status invariant violations, empty when consistent."""
        problems = []
        if self.is_completed:
            if self.completed_at is None:
                problems.append("completed task has no completion timestamp")
            if self.not_done_reason is not None:
                problems.append("completed task has a skip reason")
        elif self.is_not_done:
            if self.not_done_reason is None:
                problems.append("skipped task has no skip reason")
            if self.completed_at is not None:
                problems.append("skipped task has a completion timestamp")
        else:
            if self.completed_at is not None:
                problems.append("pending task has a completion timestamp")
            if self.not_done_reason is not None:
                problems.append("pending task has a skip reason")
        return problems

    def copy(self) -> "TaskInstance":
        return replace(self)

    def create_next_instance(
        self,
        due_date: date,
        now: datetime,
        due_time: Optional[time] = None,
        progress_start: Optional[datetime] = None,
    ) -> "TaskInstance":
        """Plan the next occurrence of this routine.

        The new instance joins the same routine group, keeps the due time
        unless one is given, and starts its countdown at ``progress_start``
        (typically the last completion) or at ``now``.
        """
        return TaskInstance(
            title=self.title,
            due_date=due_date,
            due_time=due_time or self.due_time,
            status=TaskStatus.PENDING,
            progress_start_date=progress_start or now,
            routine_group_id=self.effective_group_id,
            created_at=now,
            is_routine=True,
            is_routine_active=self.is_routine_active,
            category_id=self.category_id,
            notes=self.notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "due_date": self.due_date.isoformat(),
            "due_time": _iso(self.due_time),
            "status": self.status.value,
            "completed_at": _iso(self.completed_at),
            "not_done_reason": self.not_done_reason,
            "points_earned": self.points_earned,
            "progress_start_date": _iso(self.progress_start_date),
            "routine_group_id": self.routine_group_id,
            "postpone_count": self.postpone_count,
            "created_at": _iso(self.created_at),
            "is_routine": self.is_routine,
            "is_routine_active": self.is_routine_active,
            "category_id": self.category_id,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TaskInstance":
        try:
            status = TaskStatus(d.get("status", TaskStatus.PENDING.value))
        except ValueError:
            status = TaskStatus.PENDING
        return cls(
            id=d.get("id") or _new_id(),
            title=d["title"],
            due_date=_parse_date(d["due_date"]),
            due_time=_parse_time(d.get("due_time")),
            status=status,
            completed_at=_parse_datetime(d.get("completed_at")),
            not_done_reason=d.get("not_done_reason"),
            points_earned=d.get("points_earned", 0),
            progress_start_date=_parse_datetime(d.get("progress_start_date")),
            routine_group_id=d.get("routine_group_id"),
            postpone_count=d.get("postpone_count", 0),
            created_at=_parse_datetime(d.get("created_at")),
            is_routine=bool(d.get("is_routine", False)),
            is_routine_active=bool(d.get("is_routine_active", True)),
            category_id=d.get("category_id"),
            notes=d.get("notes", ""),
        )


@dataclass
class RoutineGroup:
    """Derived view over every instance of one routine. Never stored."""
    group_id: str
    instances: List[TaskInstance] = field(default_factory=list)

    @property
    def completed(self) -> List[TaskInstance]:
        return [t for t in self.instances if t.is_completed]

    @property
    def skipped(self) -> List[TaskInstance]:
        return [t for t in self.instances if t.is_not_done]

    @property
    def pending(self) -> List[TaskInstance]:
        return [t for t in self.instances if t.is_pending]

    @property
    def title(self) -> Optional[str]:
        return self.instances[0].title if self.instances else None

    def __len__(self) -> int:
        return len(self.instances)


@dataclass
class Reminder:
    """Lightweight standalone reminder such as "call someone back"."""
    title: str
    scheduled_at: datetime
    id: str = field(default_factory=_new_id)
    description: Optional[str] = None
    status: ReminderStatus = ReminderStatus.PENDING
    timer_mode: ReminderTimerMode = ReminderTimerMode.NONE
    counter_started_at: Optional[datetime] = None
    is_pinned: bool = False
    color: Optional[str] = None
    icon: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def is_done(self) -> bool:
        return self.status == ReminderStatus.DONE

    @property
    def is_pending(self) -> bool:
        return self.status == ReminderStatus.PENDING

    @property
    def is_countdown(self) -> bool:
        return self.timer_mode == ReminderTimerMode.COUNTDOWN

    @property
    def is_countup(self) -> bool:
        return self.timer_mode == ReminderTimerMode.COUNTUP

    def is_overdue(self, now: datetime) -> bool:
        if self.is_done:
            return False
        return now > self.scheduled_at

    def is_expired(self, now: datetime) -> bool:
        return now > self.scheduled_at + timedelta(hours=REMINDER_EXPIRY_HOURS)

    def copy(self) -> "Reminder":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "scheduled_at": self.scheduled_at.isoformat(),
            "description": self.description,
            "status": self.status.value,
            "timer_mode": self.timer_mode.value,
            "counter_started_at": _iso(self.counter_started_at),
            "is_pinned": self.is_pinned,
            "color": self.color,
            "icon": self.icon,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Reminder":
        try:
            timer_mode = ReminderTimerMode(d.get("timer_mode", ReminderTimerMode.NONE.value))
        except ValueError:
            timer_mode = ReminderTimerMode.NONE
        try:
            status = ReminderStatus(d.get("status", ReminderStatus.PENDING.value))
        except ValueError:
            status = ReminderStatus.PENDING
        return cls(
            id=d.get("id") or _new_id(),
            title=d["title"],
            scheduled_at=_parse_datetime(d["scheduled_at"]),
            description=d.get("description"),
            status=status,
            timer_mode=timer_mode,
            counter_started_at=_parse_datetime(d.get("counter_started_at")),
            is_pinned=bool(d.get("is_pinned", False)),
            color=d.get("color"),
            icon=d.get("icon"),
            created_at=_parse_datetime(d.get("created_at")),
            completed_at=_parse_datetime(d.get("completed_at")),
        )
