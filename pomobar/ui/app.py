"""System tray application for Pomobar.

Provides a pystray-based tray icon whose title mirrors the countdown, with
menu items for controlling the timer, ticking off tasks, opening the
dashboard or settings, and quitting.  The countdown runs on the
scheduler's daemon thread so the tray icon remains responsive.
"""

import logging
import os
import sys
import threading
import webbrowser
from typing import Any, Optional

from PIL import Image, ImageDraw

from pomobar.core.config import load_config
from pomobar.core.events import (
    DAILY_GOAL_REACHED,
    LANGUAGE_CHANGED,
    SESSION_COMPLETED,
    TIMER_UPDATED,
    EventBus,
)
from pomobar.core.i18n import Localizer
from pomobar.core.models import SessionType
from pomobar.core.scheduler import ThreadScheduler
from pomobar.core.settings import Settings
from pomobar.core.timer import SessionTimer
from pomobar.persistence.store import PreferenceStore, TaskStore
from pomobar.platform.base import Notifier
from pomobar.platform.factory import create_notifier
from pomobar.ui.formatter import TextFormatter

logger = logging.getLogger(__name__)

SESSION_COLORS = {
    SessionType.WORK: (235, 87, 87),
    SessionType.SHORT_BREAK: (77, 176, 79),
    SessionType.LONG_BREAK: (64, 120, 217),
}


def _create_icon(session_type: SessionType = SessionType.WORK) -> Image.Image:
    """Draw a 64x64 tray icon: a disc in the colour of *session_type*."""
    size = 64
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    margin = 4
    draw.ellipse(
        [margin, margin, size - margin, size - margin],
        fill=SESSION_COLORS[session_type],
        outline=(255, 255, 255),
        width=2,
    )
    return img


class PomobarApp:
    """Main application class that runs Pomobar as a system tray app."""

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.config = load_config(config_path)
        self.events = EventBus()
        self.timer: Optional[SessionTimer] = None
        self.settings: Optional[Settings] = None
        self.localizer: Optional[Localizer] = None
        self.task_store: Optional[TaskStore] = None
        self.notifier: Optional[Notifier] = None
        self.tray_icon = None
        self.title = ""
        self._prefs: Optional[PreferenceStore] = None
        self._flash_text: Optional[str] = None
        self._flash_timer: Optional[threading.Timer] = None
        self._flash_lock = threading.Lock()
        self._dashboard_port: int = self.config.get("dashboard", {}).get("port", 5566)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialize all components, start the dashboard and run the tray icon."""
        self._init_components()
        self._start_dashboard()
        self._run_tray()

    def stop(self) -> None:
        """Cancel the countdown and release resources.  Safe to call twice."""
        if self.timer is not None:
            self.timer.shutdown()
        self._cancel_flash()
        if self.task_store is not None:
            self.task_store.close()
            self.task_store = None
        if self._prefs is not None:
            self._prefs.close()
            self._prefs = None
        if self.tray_icon is not None:
            try:
                self.tray_icon.stop()
            except Exception:
                logger.debug("Tray icon already stopped")
            self.tray_icon = None

    def add_task(self, text: str) -> bool:
        if self.task_store is None:
            logger.warning("Task store not initialized")
            return False
        added = self.task_store.add_task(text)
        if added:
            self._update_menu()
        return added

    def toggle_task(self, index: int) -> bool:
        if self.task_store is None:
            logger.warning("Task store not initialized")
            return False
        toggled = self.task_store.toggle_task(index)
        if toggled:
            self._update_menu()
        return toggled

    def delete_task(self, index: int) -> bool:
        if self.task_store is None:
            logger.warning("Task store not initialized")
            return False
        deleted = self.task_store.delete_task(index)
        if deleted:
            self._update_menu()
        return deleted

    def clear_completed_tasks(self) -> int:
        if self.task_store is None:
            logger.warning("Task store not initialized")
            return 0
        removed = self.task_store.clear_completed()
        self._update_menu()
        return removed

    def apply_settings(self, values: dict[str, Any]) -> None:
        """Persist edited preferences and let the timer pick them up.

        Raises ValueError when a value is not an integer or the language is
        unknown; nothing is written in that case.
        """
        if self.settings is None or self.timer is None or self.localizer is None:
            logger.warning("Settings not initialized")
            return

        values = dict(values)
        language = values.pop("language", None)
        if language is not None and language not in self.localizer.available_languages():
            raise ValueError(f"Unsupported language: {language!r}")
        self.settings.update(values)
        if language is not None:
            self.localizer.language = language
        self.timer.apply_settings()
        self._update_menu()
        logger.info("Settings saved and applied")

    def open_settings(self) -> None:
        """Open the settings: the dashboard on macOS, a tkinter window elsewhere."""
        if sys.platform == "darwin":
            self._open_dashboard()
            return
        try:
            from pomobar.ui.settings import SettingsWindow

            def _on_save(updated: dict[str, Any]) -> None:
                self.apply_settings(updated)

            window = SettingsWindow(self.settings.as_dict(), self.localizer, _on_save)
            window.show()
        except Exception:
            logger.exception("Failed to open settings window")

    # ------------------------------------------------------------------
    # Component initialization
    # ------------------------------------------------------------------

    def _init_components(self) -> None:
        """Wire up all Pomobar components from config."""
        db_path = os.path.expanduser(self.config.get("database_path", "~/.pomobar/pomobar.db"))
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._prefs = PreferenceStore(db_path)
        self._prefs.init_db()
        self.task_store = TaskStore(db_path)
        self.task_store.init_db()

        self.settings = Settings(self._prefs)
        self.localizer = Localizer(self.settings, self.events)
        self.timer = SessionTimer(self.settings, self.events, ThreadScheduler())

        try:
            self.notifier = create_notifier()
        except OSError:
            logger.warning("No notifier for this platform; sounds and alerts disabled")
            self.notifier = None

        self.events.subscribe(TIMER_UPDATED, self._on_timer_updated)
        self.events.subscribe(SESSION_COMPLETED, self._on_session_completed)
        self.events.subscribe(DAILY_GOAL_REACHED, self._on_daily_goal_reached)
        self.events.subscribe(LANGUAGE_CHANGED, self._on_language_changed)
        self._refresh_title()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_timer_updated(self) -> None:
        self._refresh_title()

    def _on_session_completed(self, completed_type: SessionType) -> None:
        if self.notifier is not None:
            self.notifier.play_sound(self.config.get("sounds", {}).get("session_complete", "Glass"))

        text = TextFormatter.completion_title(completed_type, self.localizer)
        with self._flash_lock:
            self._cancel_flash_locked()
            flash_timer = threading.Timer(
                self.config.get("flash_seconds", 3), lambda: self._end_flash(flash_timer)
            )
            flash_timer.daemon = True
            self._flash_text = text
            self._flash_timer = flash_timer
            flash_timer.start()
        self._refresh_title()

    def _on_daily_goal_reached(self) -> None:
        if self.notifier is None:
            logger.info("%s", self.localizer.get("goalReachedMessage"))
            return
        L = self.localizer
        self.notifier.play_sound(self.config.get("sounds", {}).get("goal_reached", "Funk"))
        self.notifier.alert(L.get("goalReachedTitle"), L.get("goalReachedMessage"), L.get("great"))

    def _on_language_changed(self, code: str) -> None:
        self._refresh_title()

    def _end_flash(self, flash_timer: Optional[threading.Timer] = None) -> None:
        """Restore the countdown title; a timer that was replaced is ignored."""
        with self._flash_lock:
            if flash_timer is not None and flash_timer is not self._flash_timer:
                return
            self._flash_text = None
            self._flash_timer = None
        self._refresh_title()

    def _cancel_flash(self) -> None:
        with self._flash_lock:
            self._cancel_flash_locked()

    def _cancel_flash_locked(self) -> None:
        if self._flash_timer is not None:
            self._flash_timer.cancel()
            self._flash_timer = None
        self._flash_text = None

    def _refresh_title(self) -> None:
        if self.timer is None:
            return
        snapshot = self.timer.snapshot()
        with self._flash_lock:
            flash_text = self._flash_text
        self.title = flash_text or TextFormatter.status_title(snapshot)
        if self.tray_icon is not None:
            self.tray_icon.title = self.title
            self.tray_icon.icon = _create_icon(snapshot.session_type)
        self._update_menu()

    def _update_menu(self) -> None:
        if self.tray_icon is not None:
            try:
                self.tray_icon.update_menu()
            except Exception:
                logger.debug("Tray menu refresh failed", exc_info=True)

    # ------------------------------------------------------------------
    # System tray
    # ------------------------------------------------------------------

    def _run_tray(self) -> None:
        """Create and run the pystray system tray icon."""
        try:
            import pystray
            from pystray import Menu, MenuItem
        except ImportError:
            logger.warning(
                "pystray not available; running without system tray. "
                "Install pystray for tray icon support."
            )
            return

        L = self.localizer
        timer = self.timer

        def _action_label(item):
            return TextFormatter.action_label(timer.state, L)

        def _session_label(item):
            return f"{L.session_name(timer.session_type)}  {timer.formatted_time}"

        def _goal_label(item):
            snap = timer.snapshot()
            return TextFormatter.goal_text(snap.completed_sessions, snap.daily_goal, L)

        menu = Menu(
            MenuItem(_action_label, lambda: timer.toggle_start_pause(), default=True),
            MenuItem(lambda item: L.get("reset"), lambda: timer.reset()),
            MenuItem(lambda item: L.get("skip"), lambda: timer.skip()),
            Menu.SEPARATOR,
            MenuItem(_session_label, None, enabled=False),
            MenuItem(_goal_label, None, enabled=False),
            MenuItem(lambda item: L.get("resetDay"), lambda: timer.reset_day()),
            Menu.SEPARATOR,
            MenuItem(lambda item: L.get("tasks"), Menu(lambda: self._task_menu_items(MenuItem, Menu))),
            MenuItem(lambda item: L.get("dashboard"), lambda: self._open_dashboard()),
            MenuItem(lambda item: L.get("settings"), lambda: self.open_settings()),
            Menu.SEPARATOR,
            MenuItem(lambda item: L.get("quit"), lambda: self._quit()),
        )

        snapshot = timer.snapshot()
        self.tray_icon = pystray.Icon(
            "Pomobar", _create_icon(snapshot.session_type), self.title, menu
        )
        self.tray_icon.run()

    def _task_menu_items(self, MenuItem, Menu) -> list:
        """Build the Tasks submenu: one checkable entry per task."""
        L = self.localizer
        tasks = self.task_store.list_tasks() if self.task_store is not None else []
        items = []
        for index, task in enumerate(tasks):
            items.append(
                MenuItem(
                    task.text,
                    self._make_toggle(index),
                    checked=lambda item, done=task.done: done,
                )
            )
        if not items:
            items.append(MenuItem(L.get("noTasks"), None, enabled=False))
        items.append(Menu.SEPARATOR)
        items.append(MenuItem(L.get("clearCompleted"), lambda: self.clear_completed_tasks()))
        return items

    def _make_toggle(self, index: int):
        return lambda: self.toggle_task(index)

    def _quit(self) -> None:
        """Quit the application cleanly."""
        self.stop()

    # ------------------------------------------------------------------
    # Web dashboard
    # ------------------------------------------------------------------

    def _start_dashboard(self) -> None:
        """Start the web dashboard in a background thread."""
        if not self.config.get("dashboard", {}).get("enabled", True):
            logger.info("Dashboard disabled in config")
            return
        try:
            from pomobar.ui.web import start_dashboard
            start_dashboard(self, port=self._dashboard_port)
        except Exception:
            logger.exception("Failed to start web dashboard")

    def _open_dashboard(self) -> None:
        """Open the dashboard in the default browser."""
        try:
            webbrowser.open(f"http://127.0.0.1:{self._dashboard_port}")
        except Exception:
            logger.exception("Failed to open dashboard")
