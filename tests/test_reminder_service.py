"""Tests for ReminderService and reminder timer text."""
from datetime import datetime, timedelta

import pytest

from config import ReminderStatus, ReminderTimerMode
from core import ServiceContainer
from events import AppEvent
from models.entities import Reminder
from models.errors import ReminderNotFoundError
from services.reminder_service import timer_text

NOW = datetime(2026, 3, 10, 12, 0)


class TestTimerText:
    def test_countdown_ahead(self):
        reminder = Reminder("Call back", NOW + timedelta(hours=2, minutes=5),
                            timer_mode=ReminderTimerMode.COUNTDOWN)
        assert timer_text(reminder, NOW) == "in 2h 5m"

    def test_countdown_passed(self):
        reminder = Reminder("Call back", NOW - timedelta(days=3), timer_mode=ReminderTimerMode.COUNTDOWN)
        assert timer_text(reminder, NOW) == "3d ago"

    def test_countdown_now(self):
        reminder = Reminder("Call back", NOW, timer_mode=ReminderTimerMode.COUNTDOWN)
        assert timer_text(reminder, NOW) == "now"

    def test_countup_from_counter_start(self):
        reminder = Reminder("Laundry", NOW + timedelta(hours=1), timer_mode=ReminderTimerMode.COUNTUP,
                            counter_started_at=NOW - timedelta(minutes=7))
        assert timer_text(reminder, NOW) == "7m ago"

    def test_countup_not_started(self):
        reminder = Reminder("Laundry", NOW + timedelta(hours=1), timer_mode=ReminderTimerMode.COUNTUP)
        assert timer_text(reminder, NOW) == "starting soon"

    def test_no_timer(self):
        assert timer_text(Reminder("Laundry", NOW), NOW) == ""


class TestReminderService:
    async def test_add(self, services: ServiceContainer, clock, collector):
        events = collector(AppEvent.REMINDER_CREATED)
        reminder = await services.reminder_service.add("  Call mom ", NOW + timedelta(hours=1))
        assert reminder.title == "Call mom"
        assert reminder.created_at == clock.now
        assert reminder.is_pending
        assert events.count(AppEvent.REMINDER_CREATED) == 1

    async def test_toggle_done_and_back(self, services: ServiceContainer, clock):
        reminder = await services.reminder_service.add("Call mom", NOW)
        done = await services.reminder_service.toggle_done(reminder.id)
        assert done.status == ReminderStatus.DONE
        assert done.completed_at == clock.now
        pending = await services.reminder_service.toggle_done(reminder.id)
        assert pending.is_pending
        assert pending.completed_at is None

    async def test_toggle_pin(self, services: ServiceContainer):
        reminder = await services.reminder_service.add("Call mom", NOW)
        assert (await services.reminder_service.toggle_pin(reminder.id)).is_pinned
        assert not (await services.reminder_service.toggle_pin(reminder.id)).is_pinned

    async def test_start_counter(self, services: ServiceContainer, clock):
        reminder = await services.reminder_service.add("Laundry", NOW)
        counting = await services.reminder_service.start_counter(reminder.id)
        assert counting.is_countup
        assert counting.counter_started_at == clock.now

    async def test_list_sorted(self, services: ServiceContainer):
        svc = services.reminder_service
        late = await svc.add("Late", NOW + timedelta(hours=5))
        early = await svc.add("Early", NOW + timedelta(hours=1))
        done = await svc.add("Done", NOW)
        pinned = await svc.add("Pinned", NOW + timedelta(hours=9))
        await svc.toggle_done(done.id)
        await svc.toggle_pin(pinned.id)

        ordered = await svc.list_sorted()
        assert [r.id for r in ordered] == [pinned.id, early.id, late.id, done.id]

    async def test_delete(self, services: ServiceContainer, collector):
        events = collector(AppEvent.REMINDER_DELETED)
        reminder = await services.reminder_service.add("Call mom", NOW)
        await services.reminder_service.delete(reminder.id)
        assert await services.reminder_service.list_sorted() == []
        assert events.last(AppEvent.REMINDER_DELETED) == reminder.id

    async def test_delete_missing_raises(self, services: ServiceContainer):
        with pytest.raises(ReminderNotFoundError):
            await services.reminder_service.delete("missing")

    async def test_purge_expired(self, services: ServiceContainer, clock):
        svc = services.reminder_service
        await svc.add("Old", clock.now - timedelta(hours=25))
        keep = await svc.add("Recent", clock.now - timedelta(hours=23))
        assert await svc.purge_expired() == 1
        assert [r.id for r in await svc.list_sorted()] == [keep.id]
