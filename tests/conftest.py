"""Shared fixtures for life manager tests."""
from datetime import datetime, timedelta

import pytest

from core import ServiceContainer, bootstrap
from events import AppEvent, event_bus


NOW = datetime(2026, 3, 10, 12, 0, 0)


class FakeClock:
    """Deterministic stand-in for datetime.now."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class EventCollector:
    """Subscribe to events and record them for assertions."""

    def __init__(self, *events: AppEvent):
        self.received: list[tuple[AppEvent, object]] = []
        self._subs = []
        for ev in events:
            sub = event_bus.subscribe(ev, lambda data, _ev=ev: self.received.append((_ev, data)))
            self._subs.append(sub)

    def count(self, event: AppEvent) -> int:
        return sum(1 for ev, _ in self.received if ev == event)

    def last(self, event: AppEvent):
        for ev, data in reversed(self.received):
            if ev == event:
                return data
        return None

    def cleanup(self):
        for sub in self._subs:
            sub.unsubscribe()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(clock: FakeClock) -> ServiceContainer:
    """Provide a fresh ServiceContainer with empty in-memory stores.

    Reuses the module-level event bus but clears its subscriptions
    between tests for isolation.
    """
    event_bus.clear()
    svc = bootstrap(clock=clock)
    yield svc
    event_bus.clear()


@pytest.fixture
def collector():
    collectors = []

    def _make(*events: AppEvent) -> EventCollector:
        c = EventCollector(*events)
        collectors.append(c)
        return c

    yield _make
    for c in collectors:
        c.cleanup()
