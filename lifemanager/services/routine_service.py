import logging
from datetime import date, datetime, time
from typing import Callable, List, Optional

from events import AppEvent, event_bus
from models.entities import RoutineGroup, TaskInstance
from models.errors import InvalidTransitionError
from repository import TaskStore
from services.recurrence import suggest_next_due_date
from services.stats import RoutineStats, pick_routine_representatives, stats_service

logger = logging.getLogger(__name__)


class RoutineService:
    """Service for routine and task instance operations.

    Every mutation goes through the store and is announced on the event bus
    so list and statistics views can refresh. The clock is injectable; all
    timestamps the service writes come from it.
    """

    def __init__(self, tasks: TaskStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self._tasks = tasks
        self._clock = clock

    async def create_task(
        self,
        title: str,
        due_date: date,
        due_time: Optional[time] = None,
        is_routine: bool = False,
        progress_start: Optional[datetime] = None,
        category_id: Optional[str] = None,
    ) -> TaskInstance:
        """Create a task; with ``is_routine`` it becomes the root of a new routine."""
        task = TaskInstance(
            title=title.strip(),
            due_date=due_date,
            due_time=due_time,
            is_routine=is_routine,
            progress_start_date=progress_start,
            created_at=self._clock(),
            category_id=category_id,
        )
        await self._tasks.add(task)
        logger.info(f"Created {'routine' if is_routine else 'task'} '{task.title}' due {due_date}")
        event_bus.emit(AppEvent.TASK_CREATED, task)
        return task

    async def get_task(self, task_id: str) -> TaskInstance:
        return await self._tasks.get(task_id)

    async def load_group(self, group_id: str) -> RoutineGroup:
        return await self._tasks.load_group(group_id)

    async def list_routines(self) -> List[TaskInstance]:
        """One representative instance per routine, sorted by title."""
        return pick_routine_representatives(await self._tasks.load_all())

    async def stats_for(self, group_id: str) -> RoutineStats:
        group = await self._tasks.load_group(group_id)
        return stats_service.calculate(group, self._clock())

    async def plan_next(
        self,
        task_id: str,
        due_date: Optional[date] = None,
        due_time: Optional[time] = None,
    ) -> TaskInstance:
        """Plan the next instance of the routine ``task_id`` belongs to.

        Without an explicit date the routine's average interval suggests one.
        The countdown of the new instance starts at the routine's last
        completion, or now when it was never completed.
        """
        source = await self._tasks.get(task_id)
        if not source.is_routine_task:
            # A plain task becomes the root of the new routine
            source.is_routine = True
            await self._tasks.update(source)
            logger.info(f"Promoted task {source.id} '{source.title}' to a routine")
            event_bus.emit(AppEvent.TASK_UPDATED, source)
        now = self._clock()
        stats = stats_service.calculate(await self._tasks.load_group(source.effective_group_id), now)

        if due_date is None:
            due_date = suggest_next_due_date(source.due_date, stats.average_interval, now.date())

        next_task = source.create_next_instance(
            due_date=due_date,
            now=now,
            due_time=due_time,
            progress_start=stats.last_completed_at,
        )
        await self._tasks.add(next_task)
        logger.info(f"Planned next '{next_task.title}' for {due_date}")
        event_bus.emit(AppEvent.ROUTINE_PLANNED, next_task)
        return next_task

    async def mark_done(self, task_id: str, points: Optional[int] = None) -> TaskInstance:
        task = await self._tasks.get(task_id)
        if task.is_completed:
            logger.debug(f"Task {task_id} already completed at {task.completed_at}")
            return task
        task.mark_completed(self._clock(), points)
        await self._tasks.update(task)
        event_bus.emit(AppEvent.TASK_COMPLETED, task)
        return task

    async def mark_not_done(
        self,
        task_id: str,
        reason: str,
        points: Optional[int] = None,
    ) -> TaskInstance:
        """Skip an instance. ``points`` is typically a negative penalty."""
        task = await self._tasks.get(task_id)
        task.mark_not_done(reason, points)
        await self._tasks.update(task)
        event_bus.emit(AppEvent.TASK_SKIPPED, task)
        return task

    async def undo(self, task_id: str) -> TaskInstance:
        """Revert a completion or a skip back to pending."""
        task = await self._tasks.get(task_id)
        if task.is_pending:
            raise InvalidTransitionError(f"Task {task_id} is already pending; nothing to undo.")
        previous = task.status
        task.reset_to_pending()
        await self._tasks.update(task)
        logger.info(f"Undid {previous.value} on '{task.title}'")
        event_bus.emit(AppEvent.TASK_UNDONE, task)
        return task

    async def postpone(self, task_id: str, new_due_date: date) -> TaskInstance:
        task = await self._tasks.get(task_id)
        if not task.is_pending:
            raise InvalidTransitionError(f"Only pending tasks can be postponed ({task_id}).")
        task.due_date = new_due_date
        task.postpone_count += 1
        await self._tasks.update(task)
        event_bus.emit(AppEvent.TASK_POSTPONED, task)
        return task

    async def update_task(self, task: TaskInstance) -> TaskInstance:
        """Persist edits made to a snapshot, rejecting inconsistent status fields."""
        problems = task.validate()
        if problems:
            raise InvalidTransitionError(f"Task {task.id}: {'; '.join(problems)}")
        await self._tasks.update(task)
        event_bus.emit(AppEvent.TASK_UPDATED, task)
        return task

    async def delete_task(self, task_id: str) -> None:
        await self._tasks.delete(task_id)
        event_bus.emit(AppEvent.TASK_DELETED, task_id)

    async def delete_routine(self, group_id: str) -> int:
        """Delete every instance of a routine."""
        removed = await self._tasks.delete_group(group_id)
        logger.info(f"Deleted routine {group_id} ({removed} instances)")
        event_bus.emit(AppEvent.ROUTINE_DELETED, group_id)
        return removed

    async def toggle_active(self, group_id: str) -> bool:
        """Pause or resume a routine. Returns the new active flag."""
        group = await self._tasks.load_group(group_id)
        if not group.instances:
            return False
        active = not group.instances[0].is_routine_active
        for task in group.instances:
            task.is_routine_active = active
            await self._tasks.update(task)
        event_bus.emit(AppEvent.ROUTINE_TOGGLED, {"group_id": group_id, "active": active})
        return active
