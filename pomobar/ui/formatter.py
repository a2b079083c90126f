"""Text formatter for Pomobar.

Renders timer snapshots as tray titles, goal messages and a plain-text
status report for the command line.
"""

from pomobar.core.i18n import Localizer
from pomobar.core.models import SessionType, TaskItem, TimerSnapshot, TimerState

WORK_ICON = "🍅"
BREAK_ICON = "☕"
PAUSED_MARK = "⏸"


class TextFormatter:
    """Formats timer state as short human-readable strings."""

    @staticmethod
    def format_time(seconds: int) -> str:
        """Format *seconds* as 'MM:SS'.

        Minutes are not wrapped at 60, so 3600 renders as '60:00'.
        Negative values render as '00:00'.
        """
        minutes, secs = divmod(max(0, int(seconds)), 60)
        return f"{minutes:02d}:{secs:02d}"

    @staticmethod
    def status_title(snapshot: TimerSnapshot) -> str:
        """Title shown next to the tray icon."""
        if snapshot.state == TimerState.RUNNING:
            return TextFormatter.format_time(snapshot.remaining_seconds)
        if snapshot.state == TimerState.PAUSED:
            return f"{TextFormatter.format_time(snapshot.remaining_seconds)} {PAUSED_MARK}"
        return BREAK_ICON if snapshot.session_type.is_break else WORK_ICON

    @staticmethod
    def completion_title(completed_type: SessionType, L: Localizer) -> str:
        """Short message flashed in the tray after a session ends."""
        if completed_type.is_break:
            return L.get("letsGo")
        return L.get("sessionComplete")

    @staticmethod
    def action_label(state: TimerState, L: Localizer) -> str:
        """Label of the start/pause button for *state*."""
        if state == TimerState.RUNNING:
            return L.get("pause")
        if state == TimerState.PAUSED:
            return L.get("resume")
        return L.get("start")

    @staticmethod
    def goal_text(completed: int, goal: int, L: Localizer) -> str:
        """'3/8 sessions', or the goal-reached banner once *goal* is met."""
        if completed >= goal:
            return L.get("goalReached")
        return f"{completed}/{goal} {L.get('sessions')}"

    @staticmethod
    def goal_hint(completed: int, goal: int, L: Localizer) -> str:
        """Encouragement line shown under the goal counter."""
        if completed >= goal:
            return L.get("exceededGoal")
        return L.get("remainingGoal", goal - completed)

    @staticmethod
    def format_task(task: TaskItem) -> str:
        mark = "x" if task.done else " "
        return f"[{mark}] {task.text}"

    @staticmethod
    def format_status_report(
        snapshot: TimerSnapshot, tasks: list[TaskItem], L: Localizer
    ) -> str:
        """Plain-text summary of today's progress and the task list."""
        lines = [
            f"{L.session_name(snapshot.session_type)}: "
            f"{TextFormatter.format_time(snapshot.remaining_seconds)}",
            TextFormatter.goal_text(snapshot.completed_sessions, snapshot.daily_goal, L),
            TextFormatter.goal_hint(snapshot.completed_sessions, snapshot.daily_goal, L),
            "",
            f"{L.get('tasks')}:",
        ]
        if not tasks:
            lines.append(f"  {L.get('noTasks')}")
        for index, task in enumerate(tasks, start=1):
            lines.append(f"  {index}. {TextFormatter.format_task(task)}")
        return "\n".join(lines) + "\n"
