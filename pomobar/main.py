"""Pomobar application entry point.

Supports three modes:
  - GUI mode (default): launches the system tray application
  - --status: prints today's progress and the task list to stdout
  - --reset-day: zeroes today's completed-session count

Usage:
    python -m pomobar.main              # GUI mode
    python -m pomobar.main --status     # print today's progress
    python -m pomobar.main --reset-day  # start the day over
"""

import argparse
import logging
import os

from pomobar.core.config import get_default_config_path, load_config
from pomobar.core.events import EventBus
from pomobar.core.i18n import Localizer
from pomobar.core.scheduler import ThreadScheduler
from pomobar.core.settings import Settings
from pomobar.core.timer import SessionTimer
from pomobar.persistence.store import PreferenceStore, TaskStore
from pomobar.ui.formatter import TextFormatter


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="pomobar",
        description="Pomobar: Pomodoro timer for the system tray",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--status",
        action="store_true",
        help="Print today's progress and tasks and exit",
    )
    group.add_argument(
        "--reset-day",
        action="store_true",
        help="Reset today's completed-session count and exit",
    )
    return parser


def _open_stores(config: dict) -> tuple[PreferenceStore, TaskStore]:
    db_path = os.path.expanduser(config.get("database_path", "~/.pomobar/pomobar.db"))
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    prefs = PreferenceStore(db_path)
    prefs.init_db()
    tasks = TaskStore(db_path)
    tasks.init_db()
    return prefs, tasks


def _print_status(config: dict) -> None:
    """Print today's goal progress and the task list."""
    prefs, tasks = _open_stores(config)
    try:
        events = EventBus()
        settings = Settings(prefs)
        timer = SessionTimer(settings, events, ThreadScheduler())
        localizer = Localizer(settings, events)
        print(TextFormatter.format_status_report(timer.snapshot(), tasks.list_tasks(), localizer), end="")
    finally:
        tasks.close()
        prefs.close()


def _reset_day(config: dict) -> None:
    """Zero today's completed-session count."""
    prefs, tasks = _open_stores(config)
    try:
        timer = SessionTimer(Settings(prefs), EventBus(), ThreadScheduler())
        timer.reset_day()
        print("Daily progress reset.")
    finally:
        tasks.close()
        prefs.close()


def main(args: list[str] | None = None) -> None:
    """Entry point for Pomobar.

    When *args* is ``None`` the arguments are read from ``sys.argv``.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = build_parser()
    parsed = parser.parse_args(args)

    config_path = get_default_config_path()
    config = load_config(str(config_path))
    logging.getLogger().setLevel(str(config.get("log_level", "INFO")).upper())

    if parsed.status:
        _print_status(config)
    elif parsed.reset_day:
        _reset_day(config)
    else:
        # GUI mode: pystray and Pillow are only imported here
        from pomobar.ui.app import PomobarApp

        app = PomobarApp(str(config_path))
        app.start()


if __name__ == "__main__":
    main()
