from enum import Enum, auto
from typing import Callable, Dict, Any, Optional
import inspect
import logging
import threading
import uuid
import weakref

logger = logging.getLogger(__name__)


class AppEvent(Enum):
    """Change notifications published by the stores and services."""
    TASK_CREATED = auto()
    TASK_UPDATED = auto()
    TASK_COMPLETED = auto()
    TASK_SKIPPED = auto()
    TASK_UNDONE = auto()
    TASK_POSTPONED = auto()
    TASK_DELETED = auto()
    ROUTINE_PLANNED = auto()
    ROUTINE_DELETED = auto()
    ROUTINE_TOGGLED = auto()
    REMINDER_CREATED = auto()
    REMINDER_UPDATED = auto()
    REMINDER_DELETED = auto()
    COUNTDOWN_TICK = auto()
    DATA_INVALIDATED = auto()


Handler = Callable[[Any], None]


class Subscription:
    """Handle returned by EventBus.subscribe().

    Keeps a strong reference to the handler when subscribed with
    ``strong=True``; keep the Subscription around for as long as the handler
    should fire and call unsubscribe() when done.
    """

    def __init__(
        self,
        bus: "EventBus",
        event: AppEvent,
        subscription_id: str,
        strong_ref: Optional[Handler] = None,
    ):
        self._bus = bus
        self._event = event
        self._subscription_id = subscription_id
        self._strong_ref = strong_ref
        self._active = True

    @property
    def id(self) -> str:
        return self._subscription_id

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._bus._remove(self._event, self._subscription_id)
            self._active = False
            self._strong_ref = None


def _weak_handler(handler: Handler, on_dead: Callable[[], None]) -> Callable[[], Optional[Handler]]:
    """Weak reference to a handler; builtins that refuse weakrefs are held strongly."""
    if inspect.ismethod(handler):
        return weakref.WeakMethod(handler, lambda _ref: on_dead())
    try:
        return weakref.ref(handler, lambda _ref: on_dead())
    except TypeError:
        return lambda: handler


class EventBus:
    """Singleton publish/subscribe hub.

    Presenters and screens subscribe to invalidation events instead of
    polling the stores. Bound methods are held weakly so a destroyed view
    drops its subscription on its own. Lambdas and closures are held
    strongly by the returned Subscription, so keep it.
    """
    _instance: Optional["EventBus"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._listeners: Dict[AppEvent, Dict[str, Callable]] = {}
        return cls._instance

    def subscribe(self, event: AppEvent, handler: Handler, strong: bool = False) -> Subscription:
        """Register ``handler`` for ``event`` and return its Subscription."""
        subscription_id = str(uuid.uuid4())
        listeners = self._listeners.setdefault(event, {})

        is_lambda = getattr(handler, "__name__", "") == "<lambda>"
        is_closure = not inspect.ismethod(handler) and getattr(handler, "__closure__", None) is not None
        if (is_lambda or is_closure) and not strong:
            logger.debug(f"EventBus: holding {event.name} handler strongly ({handler!r})")
            strong = True

        def on_dead() -> None:
            logger.debug(f"EventBus: {event.name} handler was garbage collected")
            self._remove(event, subscription_id)

        listeners[subscription_id] = _weak_handler(handler, on_dead)
        return Subscription(self, event, subscription_id, strong_ref=handler if strong else None)

    def _remove(self, event: AppEvent, subscription_id: str) -> None:
        listeners = self._listeners.get(event)
        if listeners is not None:
            listeners.pop(subscription_id, None)

    def emit(self, event: AppEvent, data: Any = None) -> None:
        """Call every live handler for ``event``.

        A failing handler is logged and does not stop the others.
        """
        listeners = self._listeners.get(event)
        if not listeners:
            return
        for subscription_id, ref in list(listeners.items()):
            handler = ref()
            if handler is None:
                listeners.pop(subscription_id, None)
                continue
            try:
                handler(data)
            except Exception:
                logger.exception(f"Error in event handler for {event.name}")

    def listener_count(self, event: AppEvent) -> int:
        return len(self._listeners.get(event, {}))

    def clear(self) -> None:
        """Drop every subscription. Used between tests."""
        self._listeners.clear()


event_bus = EventBus()
