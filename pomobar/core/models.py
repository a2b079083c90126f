"""Core data models for Pomobar.

Defines the enums and dataclasses shared across the application:
- Timer: SessionType, TimerState, TimerSnapshot
- Tasks: TaskItem
"""

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class SessionType(Enum):
    """Kind of interval the timer is counting down."""
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not SessionType.WORK


class TimerState(Enum):
    """Run state of the countdown."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable view of the timer handed to the tray, dashboard and CLI."""
    state: TimerState
    session_type: SessionType
    remaining_seconds: int
    duration_seconds: int
    completed_sessions: int
    daily_goal: int

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return 1.0 - self.remaining_seconds / self.duration_seconds

    @property
    def formatted_time(self) -> str:
        minutes, seconds = divmod(max(0, self.remaining_seconds), 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def goal_reached(self) -> bool:
        return self.completed_sessions >= self.daily_goal


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

@dataclass
class TaskItem:
    """A single entry of the to-do list shown next to the timer."""
    text: str
    done: bool = False
