"""Session timer for Pomobar.

Counts down one session at a time and sequences session types with a fixed
cadence: work, then a short break, except every Nth work session which is
followed by a long break.  Completed work sessions count towards the daily
goal.

All mutations, whether triggered by the user or by the ticker thread, run
under one re-entrant lock, so a tick can never interleave with ``skip()``,
``reset()`` or ``set_progress()``.
"""

import logging
import threading
from typing import Optional

from pomobar.core.events import (
    DAILY_GOAL_REACHED,
    SESSION_COMPLETED,
    TIMER_UPDATED,
    EventBus,
)
from pomobar.core.models import SessionType, TimerSnapshot, TimerState
from pomobar.core.scheduler import ScheduledTask, Scheduler
from pomobar.core.settings import Settings

logger = logging.getLogger(__name__)

TICK_INTERVAL_SECONDS = 1.0


class SessionTimer:
    """Pomodoro countdown with session sequencing and daily-goal accounting."""

    def __init__(self, settings: Settings, events: EventBus, scheduler: Scheduler) -> None:
        self.settings = settings
        self.events = events
        self.scheduler = scheduler
        self._lock = threading.RLock()
        self._countdown: Optional[ScheduledTask] = None

        self.state = TimerState.IDLE
        self.session_type = SessionType.WORK
        self.remaining_seconds = self.duration_for(SessionType.WORK)
        self.completed_sessions = settings.completed_today

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def duration_for(self, session_type: SessionType) -> int:
        """Configured length of *session_type* in seconds (always > 0)."""
        return self.settings.minutes_for(session_type) * 60

    @property
    def current_duration(self) -> int:
        return self.duration_for(self.session_type)

    @property
    def progress(self) -> float:
        return 1.0 - self.remaining_seconds / self.current_duration

    @property
    def formatted_time(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            # completed_today rolls over to 0 at the first read of a new day.
            self.completed_sessions = self.settings.completed_today
            return TimerSnapshot(
                state=self.state,
                session_type=self.session_type,
                remaining_seconds=self.remaining_seconds,
                duration_seconds=self.current_duration,
                completed_sessions=self.completed_sessions,
                daily_goal=self.settings.daily_goal,
            )

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            if self.state == TimerState.RUNNING:
                return
            self.state = TimerState.RUNNING
            self._countdown = self.scheduler.schedule_repeating(
                TICK_INTERVAL_SECONDS, self._on_tick
            )
            logger.info(
                "Timer started: session=%s remaining=%ss",
                self.session_type.value,
                self.remaining_seconds,
            )
            self._notify_update()

    def pause(self) -> None:
        with self._lock:
            if self.state != TimerState.RUNNING:
                return
            self._cancel_countdown()
            self.state = TimerState.PAUSED
            logger.info(
                "Timer paused: session=%s remaining=%ss",
                self.session_type.value,
                self.remaining_seconds,
            )
            self._notify_update()

    def toggle_start_pause(self) -> None:
        with self._lock:
            if self.state == TimerState.RUNNING:
                self.pause()
            else:
                self.start()

    def reset(self) -> None:
        with self._lock:
            self._cancel_countdown()
            self.state = TimerState.IDLE
            self.remaining_seconds = self.current_duration
            logger.info("Timer reset: session=%s", self.session_type.value)
            self._notify_update()

    def skip(self) -> None:
        with self._lock:
            self._cancel_countdown()
            logger.info(
                "Session skipped: session=%s remaining=%ss",
                self.session_type.value,
                self.remaining_seconds,
            )
            self._complete_session()

    def set_progress(self, progress: float) -> None:
        """Scrub the current session to *progress* (0.0 = start, 1.0 = end).

        Never drops below one second, so scrubbing alone cannot complete a
        session; completion only happens on a tick or via ``skip()``.
        """
        clamped = max(0.0, min(1.0, float(progress)))
        with self._lock:
            remaining = round(self.current_duration * (1.0 - clamped))
            self.remaining_seconds = max(1, remaining)
            self._notify_update()

    def apply_settings(self) -> None:
        """Pick up changed durations.  Running or paused sessions are left alone."""
        with self._lock:
            if self.state != TimerState.IDLE:
                return
            self.remaining_seconds = self.current_duration
            self._notify_update()

    def reset_day(self) -> None:
        with self._lock:
            self.completed_sessions = 0
            self.settings.completed_today = 0
            logger.info("Daily progress reset")
            self._notify_update()

    def shutdown(self) -> None:
        """Cancel any pending countdown without touching session state."""
        with self._lock:
            self._cancel_countdown()

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    def _on_tick(self, task: ScheduledTask) -> None:
        with self._lock:
            # A tick that fired just before pause/reset/skip cancelled it.
            if task is not self._countdown or self.state != TimerState.RUNNING:
                return
            self.remaining_seconds -= 1
            if self.remaining_seconds <= 0:
                self._complete_session()
            else:
                self._notify_update()

    def _complete_session(self) -> None:
        self._cancel_countdown()

        completed_type = self.session_type

        if completed_type == SessionType.WORK:
            self.completed_sessions = self.settings.completed_today + 1
            self.settings.completed_today = self.completed_sessions

            if self.completed_sessions == self.settings.daily_goal:
                logger.info("Daily goal reached: %d sessions", self.completed_sessions)
                self.events.emit(DAILY_GOAL_REACHED)

            if self.completed_sessions % self.settings.sessions_until_long_break == 0:
                self.session_type = SessionType.LONG_BREAK
            else:
                self.session_type = SessionType.SHORT_BREAK
        else:
            self.session_type = SessionType.WORK

        self.remaining_seconds = self.current_duration
        self.state = TimerState.IDLE
        logger.info(
            "Session completed: %s -> next=%s (today=%d)",
            completed_type.value,
            self.session_type.value,
            self.completed_sessions,
        )

        self.events.emit(SESSION_COMPLETED, completed_type)
        self._notify_update()

    def _cancel_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None

    def _notify_update(self) -> None:
        self.events.emit(TIMER_UPDATED)
