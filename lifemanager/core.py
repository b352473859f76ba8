"""Headless bootstrap for the life manager services.

Builds the service layer without any UI dependency, suitable for scripts,
background jobs and testing.

Usage:
    from core import bootstrap

    svc = bootstrap()
    routine = await svc.routines.create_task("Haircut", date(2026, 3, 1), is_routine=True)
    stats = await svc.routines.stats_for(routine.effective_group_id)
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from config import LOG_FORMAT, LOG_LEVEL
from events import EventBus, event_bus
from repository import ReminderStore, TaskStore
from services.reminder_service import ReminderService
from services.routine_service import RoutineService
from services.stats import RoutineStatsService, stats_service

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container holding all initialized services for headless use."""
    tasks: TaskStore
    reminders: ReminderStore
    routines: RoutineService
    reminder_service: ReminderService
    stats: RoutineStatsService
    events: EventBus


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the configured log level and format to the root logger."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)


def bootstrap(
    tasks: Optional[TaskStore] = None,
    reminders: Optional[ReminderStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> ServiceContainer:
    """Wire stores and services together.

    Args:
        tasks: Task store to use. A fresh in-memory store if None.
        reminders: Reminder store to use. A fresh in-memory store if None.
        clock: Source of "now" for every timestamp the services write.

    Returns:
        ServiceContainer with all services ready to use.
    """
    tasks = tasks or TaskStore()
    reminders = reminders or ReminderStore()
    configure_logging()
    logger.debug("Bootstrapping services")
    return ServiceContainer(
        tasks=tasks,
        reminders=reminders,
        routines=RoutineService(tasks, clock=clock),
        reminder_service=ReminderService(reminders, clock=clock),
        stats=stats_service,
        events=event_bus,
    )
