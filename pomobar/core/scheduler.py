"""Cancellable interval timers used to drive the countdown."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):
    """Handle for a recurring callback."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Stop future invocations.  Safe to call more than once."""
        pass


class Scheduler(ABC):
    """Factory for recurring callbacks.

    The callback receives its own :class:`ScheduledTask` so the owner can
    recognise and drop an invocation that raced with ``cancel()``.
    """

    @abstractmethod
    def schedule_repeating(
        self, interval: float, callback: Callable[[ScheduledTask], None]
    ) -> ScheduledTask:
        pass


class _ThreadTask(ScheduledTask):
    def __init__(self, interval: float, callback: Callable[[ScheduledTask], None], name: str) -> None:
        self.interval = interval
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True, name=name)

    @property
    def cancelled(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._stop_event.set()

    def _run(self) -> None:
        # Event.wait returns True as soon as cancel() is called.
        while not self._stop_event.wait(self.interval):
            try:
                self._callback(self)
            except Exception:
                logger.exception("Scheduled callback failed")


class ThreadScheduler(Scheduler):
    """Runs each recurring callback on its own daemon thread."""

    def __init__(self, thread_name: str = "pomobar-ticker") -> None:
        self.thread_name = thread_name

    def schedule_repeating(
        self, interval: float, callback: Callable[[ScheduledTask], None]
    ) -> ScheduledTask:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        task = _ThreadTask(interval, callback, self.thread_name)
        task.start()
        return task
