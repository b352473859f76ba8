"""Tests for bootstrap wiring and the in-memory stores."""
from datetime import date

import pytest

from core import bootstrap
from events import AppEvent, event_bus
from models.entities import TaskInstance
from models.errors import TaskNotFoundError
from repository import TaskStore
from services.stats import stats_service


def test_bootstrap_wires_shared_store(clock):
    tasks = TaskStore()
    svc = bootstrap(tasks=tasks, clock=clock)
    assert svc.tasks is tasks
    assert svc.stats is stats_service
    assert svc.events is event_bus


async def test_services_write_through_store(services):
    routine = await services.routines.create_task("Haircut", date(2026, 3, 1), is_routine=True)
    stored = await services.tasks.get(routine.id)
    assert stored.title == "Haircut"


class TestTaskStore:
    async def test_get_returns_copy(self):
        store = TaskStore()
        task = await store.add(TaskInstance(title="Haircut", due_date=date(2026, 3, 1)))
        task.title = "Changed"
        assert (await store.get(task.id)).title == "Haircut"

    async def test_update_missing_raises(self):
        store = TaskStore()
        with pytest.raises(TaskNotFoundError):
            await store.update(TaskInstance(title="Haircut", due_date=date(2026, 3, 1)))

    async def test_delete_group(self):
        store = TaskStore()
        root = await store.add(TaskInstance(title="Haircut", due_date=date(2026, 1, 1), is_routine=True))
        await store.add(TaskInstance(title="Haircut", due_date=date(2026, 2, 1), routine_group_id=root.id))
        other = await store.add(TaskInstance(title="Dentist", due_date=date(2026, 2, 1), is_routine=True))

        assert await store.delete_group(root.id) == 2
        assert [t.id for t in await store.load_all()] == [other.id]

    async def test_invalidate_emits(self, collector):
        events = collector(AppEvent.DATA_INVALIDATED)
        TaskStore().invalidate()
        assert events.last(AppEvent.DATA_INVALIDATED) == "tasks"

    async def test_clear(self):
        store = TaskStore()
        await store.add(TaskInstance(title="Haircut", due_date=date(2026, 3, 1)))
        await store.clear()
        assert await store.load_all() == []
