import logging
from datetime import datetime
from typing import Callable, List, Optional

from config import ReminderStatus, ReminderTimerMode
from events import AppEvent, event_bus
from formatters import format_compact
from models.entities import Reminder
from repository import ReminderStore

logger = logging.getLogger(__name__)


def timer_text(reminder: Reminder, now: datetime) -> str:
    """Live timer label for a reminder card, based on its timer mode."""
    if reminder.is_countdown:
        remaining = reminder.scheduled_at - now
        if remaining.total_seconds() < 0:
            return f"{format_compact(remaining)} ago"
        text = format_compact(remaining)
        return "now" if text == "now" else f"in {text}"

    if reminder.is_countup:
        started = reminder.counter_started_at or reminder.scheduled_at
        elapsed = now - started
        if elapsed.total_seconds() < 0:
            return "starting soon"
        return f"{format_compact(elapsed)} ago"

    return ""


def _sort_key(reminder: Reminder):
    return (not reminder.is_pinned, reminder.is_done, reminder.scheduled_at)


class ReminderService:
    """Service for standalone reminders."""

    def __init__(self, reminders: ReminderStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self._reminders = reminders
        self._clock = clock

    async def add(
        self,
        title: str,
        scheduled_at: datetime,
        description: Optional[str] = None,
        timer_mode: ReminderTimerMode = ReminderTimerMode.NONE,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Reminder:
        reminder = Reminder(
            title=title.strip(),
            scheduled_at=scheduled_at,
            description=description,
            timer_mode=timer_mode,
            color=color,
            icon=icon,
            created_at=self._clock(),
        )
        await self._reminders.add(reminder)
        event_bus.emit(AppEvent.REMINDER_CREATED, reminder)
        return reminder

    async def toggle_done(self, reminder_id: str) -> Reminder:
        reminder = await self._reminders.get(reminder_id)
        if reminder.is_done:
            reminder.status = ReminderStatus.PENDING
            reminder.completed_at = None
        else:
            reminder.status = ReminderStatus.DONE
            reminder.completed_at = self._clock()
        await self._reminders.update(reminder)
        event_bus.emit(AppEvent.REMINDER_UPDATED, reminder)
        return reminder

    async def toggle_pin(self, reminder_id: str) -> Reminder:
        reminder = await self._reminders.get(reminder_id)
        reminder.is_pinned = not reminder.is_pinned
        await self._reminders.update(reminder)
        event_bus.emit(AppEvent.REMINDER_UPDATED, reminder)
        return reminder

    async def start_counter(self, reminder_id: str) -> Reminder:
        """Switch a reminder to count-up mode starting now."""
        reminder = await self._reminders.get(reminder_id)
        reminder.timer_mode = ReminderTimerMode.COUNTUP
        reminder.counter_started_at = self._clock()
        await self._reminders.update(reminder)
        event_bus.emit(AppEvent.REMINDER_UPDATED, reminder)
        return reminder

    async def delete(self, reminder_id: str) -> None:
        await self._reminders.delete(reminder_id)
        event_bus.emit(AppEvent.REMINDER_DELETED, reminder_id)

    async def list_sorted(self) -> List[Reminder]:
        """Pinned first, then pending before done, then by scheduled time."""
        return sorted(await self._reminders.load_all(), key=_sort_key)

    async def purge_expired(self) -> int:
        """Delete reminders more than a day past their scheduled time."""
        now = self._clock()
        expired = [r for r in await self._reminders.load_all() if r.is_expired(now)]
        for reminder in expired:
            await self._reminders.delete(reminder.id)
            event_bus.emit(AppEvent.REMINDER_DELETED, reminder.id)
        if expired:
            logger.info(f"Purged {len(expired)} expired reminders")
        return len(expired)
