"""In-memory task and reminder stores.

The app's durable store lives outside this package. These stores implement
the same async surface the services depend on, so they back headless use
and the test suite:

    tasks = TaskStore()
    await tasks.add(TaskInstance(title="Haircut", due_date=date(2026, 3, 1)))
    group = await tasks.load_group(group_id)

Reads return copies (snapshots); mutate through the store, then call
``invalidate()`` or rely on the service events to refresh views.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from events import AppEvent, event_bus
from models.entities import Reminder, RoutineGroup, TaskInstance
from models.errors import ReminderNotFoundError, TaskNotFoundError
from services.stats import routine_group

logger = logging.getLogger(__name__)


class TaskStore:
    """Task instances keyed by id, serialized by an asyncio lock."""

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskInstance] = {}
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def add(self, task: TaskInstance) -> TaskInstance:
        async with self._get_lock():
            self._tasks[task.id] = task.copy()
            logger.debug(f"Stored task {task.id} '{task.title}'")
        return task

    async def update(self, task: TaskInstance) -> TaskInstance:
        async with self._get_lock():
            if task.id not in self._tasks:
                raise TaskNotFoundError(task.id)
            self._tasks[task.id] = task.copy()
        return task

    async def delete(self, task_id: str) -> None:
        async with self._get_lock():
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFoundError(task_id)

    async def delete_group(self, group_id: str) -> int:
        """Delete every instance of a routine. Returns how many were removed."""
        async with self._get_lock():
            doomed = [t.id for t in routine_group(self._tasks.values(), group_id).instances]
            for task_id in doomed:
                del self._tasks[task_id]
        logger.debug(f"Deleted {len(doomed)} instances of routine {group_id}")
        return len(doomed)

    async def get(self, task_id: str) -> TaskInstance:
        async with self._get_lock():
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            return task.copy()

    async def load_all(self) -> List[TaskInstance]:
        async with self._get_lock():
            return [t.copy() for t in self._tasks.values()]

    async def load_group(self, group_id: str) -> RoutineGroup:
        return routine_group(await self.load_all(), group_id)

    def invalidate(self) -> None:
        """Tell subscribers their snapshots are stale."""
        event_bus.emit(AppEvent.DATA_INVALIDATED, "tasks")

    async def clear(self) -> None:
        async with self._get_lock():
            self._tasks.clear()


class ReminderStore:
    """Reminders keyed by id."""

    def __init__(self) -> None:
        self._reminders: Dict[str, Reminder] = {}
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def add(self, reminder: Reminder) -> Reminder:
        async with self._get_lock():
            self._reminders[reminder.id] = reminder.copy()
        return reminder

    async def update(self, reminder: Reminder) -> Reminder:
        async with self._get_lock():
            if reminder.id not in self._reminders:
                raise ReminderNotFoundError(reminder.id)
            self._reminders[reminder.id] = reminder.copy()
        return reminder

    async def delete(self, reminder_id: str) -> None:
        async with self._get_lock():
            if self._reminders.pop(reminder_id, None) is None:
                raise ReminderNotFoundError(reminder_id)

    async def get(self, reminder_id: str) -> Reminder:
        async with self._get_lock():
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                raise ReminderNotFoundError(reminder_id)
            return reminder.copy()

    async def load_all(self) -> List[Reminder]:
        async with self._get_lock():
            return [r.copy() for r in self._reminders.values()]

    def invalidate(self) -> None:
        event_bus.emit(AppEvent.DATA_INVALIDATED, "reminders")

    async def clear(self) -> None:
        async with self._get_lock():
            self._reminders.clear()
