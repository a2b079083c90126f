"""Observer bus connecting the timer to its presentation layers.

Components subscribe to named events instead of listening on a global
notification center.  Listeners are called synchronously, in subscription
order, on the thread that emitted the event.
"""

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

TIMER_UPDATED = "timer_updated"
SESSION_COMPLETED = "session_completed"
DAILY_GOAL_REACHED = "daily_goal_reached"
LANGUAGE_CHANGED = "language_changed"

Listener = Callable[..., Any]


class EventBus:
    """One-to-many fan-out of timer events."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._lock = threading.Lock()

    def subscribe(self, name: str, callback: Listener) -> None:
        with self._lock:
            self._listeners.setdefault(name, []).append(callback)

    def unsubscribe(self, name: str, callback: Listener) -> None:
        with self._lock:
            listeners = self._listeners.get(name, [])
            if callback in listeners:
                listeners.remove(callback)

    def emit(self, name: str, *args: Any) -> None:
        """Call every listener of *name*.

        A listener that raises is logged and skipped; the remaining
        listeners still run.
        """
        with self._lock:
            listeners = list(self._listeners.get(name, []))

        for callback in listeners:
            try:
                callback(*args)
            except Exception:
                logger.exception("Listener %r failed for event %s", callback, name)
