"""Tests for the live countdown ticker."""
import asyncio
from datetime import datetime, timedelta

from events import AppEvent, event_bus
from services.countdown import CountdownTicker


class Recorder:
    def __init__(self):
        self.ticks = []

    def on_tick(self, data):
        self.ticks.append(data)


async def test_publishes_immediately_and_on_each_tick(clock):
    event_bus.clear()
    recorder = Recorder()
    event_bus.subscribe(AppEvent.COUNTDOWN_TICK, recorder.on_tick)
    ticker = CountdownTicker(interval=0.01, clock=clock)

    ticker.start(clock.now + timedelta(hours=1))
    await asyncio.sleep(0.05)
    await ticker.stop()

    assert not ticker.running
    assert len(recorder.ticks) >= 2
    assert len(recorder.ticks) == ticker.ticks + 1
    assert not recorder.ticks[0].is_overdue
    event_bus.clear()


async def test_current_tracks_clock(clock):
    ticker = CountdownTicker(clock=clock)
    assert ticker.current() is None
    target = clock.now + timedelta(seconds=30)
    ticker.target = target
    assert not ticker.current().is_overdue
    clock.advance(minutes=1)
    assert ticker.current().is_overdue


async def test_start_while_running_retargets(clock):
    ticker = CountdownTicker(interval=10, clock=clock)
    ticker.start(clock.now + timedelta(hours=1))
    new_target = clock.now + timedelta(hours=2)
    ticker.start(new_target)
    assert ticker.target == new_target
    await ticker.stop()


async def test_stop_is_idempotent(clock):
    ticker = CountdownTicker(interval=10, clock=clock)
    await ticker.stop()
    ticker.start(datetime(2030, 1, 1))
    await ticker.stop()
    await ticker.stop()
    assert not ticker.running
