import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from config import COUNTDOWN_TICK_SECONDS
from events import AppEvent, event_bus
from formatters import Countdown, countdown

logger = logging.getLogger(__name__)


class CountdownTicker:
    """Re-evaluates a countdown on a fixed tick and publishes it.

    The formatting functions have no notion of time passing; a screen that
    shows a live countdown owns one of these and listens for
    ``AppEvent.COUNTDOWN_TICK``. Use a one second interval for the countdown
    sheet and a minute for list views.
    """

    def __init__(
        self,
        interval: float = COUNTDOWN_TICK_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self.target: Optional[datetime] = None
        self.ticks: int = 0
        self.running: bool = False
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    def current(self) -> Optional[Countdown]:
        if self.target is None:
            return None
        return countdown(self.target, self._clock())

    def start(self, target: datetime) -> None:
        """Start ticking towards ``target``. Must be called inside a running loop."""
        if self.running:
            self.target = target
            return
        self.target = target
        self.ticks = 0
        self.running = True
        self._stop_event = asyncio.Event()
        self._publish()
        self._task = asyncio.get_running_loop().create_task(self._tick_loop())

    async def _tick_loop(self) -> None:
        logger.debug(f"Countdown loop started for {self.target}")
        try:
            while self.running and not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                    break
                except asyncio.TimeoutError:
                    pass
                self.ticks += 1
                self._publish()
        except asyncio.CancelledError:
            logger.debug("Countdown loop cancelled")
            raise
        finally:
            self.running = False

    def _publish(self) -> None:
        event_bus.emit(AppEvent.COUNTDOWN_TICK, self.current())

    async def stop(self) -> None:
        """Stop ticking and wait for the loop to finish."""
        if not self.running or self._task is None:
            return
        self.running = False
        self._stop_event.set()
        await self._task
        self._task = None
