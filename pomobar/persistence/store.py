"""SQLite-backed persistence for user preferences and the task list."""

import logging
import sqlite3
import threading
from typing import Optional

from pomobar.core.models import TaskItem

logger = logging.getLogger(__name__)


class _SqliteStore:
    """Shared connection handling for the Pomobar stores.

    The connection is opened lazily with ``check_same_thread=False`` and is
    shared by the ticker, tray and dashboard threads.  Every access holds
    the store lock.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


class PreferenceStore(_SqliteStore):
    """Key-value preferences (durations, goal, today's count, language).

    Every write is an independent upsert; the last write wins.
    """

    def init_db(self) -> None:
        """Create the preferences table if it doesn't already exist."""
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                """\
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            row = self._get_conn().execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return default
        return row["value"]

    def set_str(self, key: str, value: str) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                "INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)",
                (key, str(value)),
            )
            conn.commit()

    def get_int(self, key: str, default: int = 0) -> int:
        """Return the integer stored under *key*, or *default*.

        A value that cannot be parsed as an integer is logged and treated
        as missing.
        """
        raw = self.get_str(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer preference %s=%r", key, raw)
            return default

    def set_int(self, key: str, value: int) -> None:
        self.set_str(key, str(int(value)))


class TaskStore(_SqliteStore):
    """Ordered to-do list addressed by position, like the tray's Tasks menu."""

    def init_db(self) -> None:
        """Create the tasks table and its ordering index."""
        with self._lock:
            conn = self._get_conn()
            conn.executescript(
                """\
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    done INTEGER NOT NULL DEFAULT 0,
                    position INTEGER NOT NULL DEFAULT 0
                );

                CREATE INDEX IF NOT EXISTS idx_tasks_position
                    ON tasks(position);
                """
            )
            conn.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_tasks(self) -> list[TaskItem]:
        with self._lock:
            rows = self._get_conn().execute(
                "SELECT text, done FROM tasks ORDER BY position, id"
            ).fetchall()
        return [TaskItem(text=r["text"], done=bool(r["done"])) for r in rows]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_task(self, text: str) -> bool:
        """Append a task.  Blank text is ignored and returns ``False``."""
        text = text.strip()
        if not text:
            return False
        with self._lock:
            conn = self._get_conn()
            row = conn.execute("SELECT COALESCE(MAX(position), -1) AS last FROM tasks").fetchone()
            conn.execute(
                "INSERT INTO tasks (text, done, position) VALUES (?, 0, ?)",
                (text, row["last"] + 1),
            )
            conn.commit()
        return True

    def toggle_task(self, index: int) -> bool:
        """Flip the done flag of the task at *index*; ``False`` if out of range."""
        with self._lock:
            task_id = self._id_at(index)
            if task_id is None:
                return False
            conn = self._get_conn()
            conn.execute(
                "UPDATE tasks SET done = CASE WHEN done = 0 THEN 1 ELSE 0 END WHERE id = ?",
                (task_id,),
            )
            conn.commit()
        return True

    def delete_task(self, index: int) -> bool:
        """Remove the task at *index*; ``False`` if out of range."""
        with self._lock:
            task_id = self._id_at(index)
            if task_id is None:
                return False
            conn = self._get_conn()
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
        return True

    def clear_completed(self) -> int:
        """Delete every done task.  Returns how many were removed."""
        with self._lock:
            conn = self._get_conn()
            cursor = conn.execute("DELETE FROM tasks WHERE done = 1")
            conn.commit()
        return cursor.rowcount

    def _id_at(self, index: int) -> Optional[int]:
        if index < 0:
            return None
        row = self._get_conn().execute(
            "SELECT id FROM tasks ORDER BY position, id LIMIT 1 OFFSET ?", (index,)
        ).fetchone()
        return row["id"] if row is not None else None
