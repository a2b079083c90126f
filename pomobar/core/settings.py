"""Typed user preferences backed by the PreferenceStore.

Durations are stored in minutes.  Reads never return a non-positive value:
anything stored as zero or less reads back as the default, which keeps
``SessionTimer.duration_for`` strictly positive.
"""

import logging
from datetime import date
from typing import Callable, Optional

from pomobar.core.models import SessionType
from pomobar.persistence.store import PreferenceStore

logger = logging.getLogger(__name__)

WORK_DURATION_KEY = "workDuration"
SHORT_BREAK_KEY = "shortBreakDuration"
LONG_BREAK_KEY = "longBreakDuration"
SESSIONS_KEY = "sessionsUntilLongBreak"
DAILY_GOAL_KEY = "dailyGoal"
COMPLETED_TODAY_KEY = "completedToday"
LAST_DATE_KEY = "lastDate"
LANGUAGE_KEY = "appLanguage"

# key -> (default, minimum, maximum)
BOUNDS: dict[str, tuple[int, int, int]] = {
    WORK_DURATION_KEY: (25, 1, 60),
    SHORT_BREAK_KEY: (5, 1, 30),
    LONG_BREAK_KEY: (15, 5, 45),
    SESSIONS_KEY: (4, 2, 10),
    DAILY_GOAL_KEY: (8, 1, 20),
}

LANGUAGES = ("fr", "en")
DEFAULT_LANGUAGE = "fr"

_SESSION_KEYS = {
    SessionType.WORK: WORK_DURATION_KEY,
    SessionType.SHORT_BREAK: SHORT_BREAK_KEY,
    SessionType.LONG_BREAK: LONG_BREAK_KEY,
}


class Settings:
    """Preference accessors with defaults, bounds and the daily rollover."""

    def __init__(
        self,
        store: PreferenceStore,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.store = store
        self._today = today or date.today

    # ------------------------------------------------------------------
    # Durations and cadence
    # ------------------------------------------------------------------

    @property
    def work_duration(self) -> int:
        return self._get_bounded(WORK_DURATION_KEY)

    @work_duration.setter
    def work_duration(self, minutes: int) -> None:
        self._set_bounded(WORK_DURATION_KEY, minutes)

    @property
    def short_break_duration(self) -> int:
        return self._get_bounded(SHORT_BREAK_KEY)

    @short_break_duration.setter
    def short_break_duration(self, minutes: int) -> None:
        self._set_bounded(SHORT_BREAK_KEY, minutes)

    @property
    def long_break_duration(self) -> int:
        return self._get_bounded(LONG_BREAK_KEY)

    @long_break_duration.setter
    def long_break_duration(self, minutes: int) -> None:
        self._set_bounded(LONG_BREAK_KEY, minutes)

    @property
    def sessions_until_long_break(self) -> int:
        return self._get_bounded(SESSIONS_KEY)

    @sessions_until_long_break.setter
    def sessions_until_long_break(self, count: int) -> None:
        self._set_bounded(SESSIONS_KEY, count)

    @property
    def daily_goal(self) -> int:
        return self._get_bounded(DAILY_GOAL_KEY)

    @daily_goal.setter
    def daily_goal(self, count: int) -> None:
        self._set_bounded(DAILY_GOAL_KEY, count)

    def minutes_for(self, session_type: SessionType) -> int:
        return self._get_bounded(_SESSION_KEYS[session_type])

    # ------------------------------------------------------------------
    # Daily progress
    # ------------------------------------------------------------------

    @property
    def completed_today(self) -> int:
        """Work sessions completed today; rolls over to 0 on a new day."""
        self._reset_if_new_day()
        return max(0, self.store.get_int(COMPLETED_TODAY_KEY, 0))

    @completed_today.setter
    def completed_today(self, count: int) -> None:
        self.store.set_int(COMPLETED_TODAY_KEY, max(0, int(count)))
        self.store.set_str(LAST_DATE_KEY, self._today_string())

    # ------------------------------------------------------------------
    # Language
    # ------------------------------------------------------------------

    @property
    def language(self) -> str:
        code = self.store.get_str(LANGUAGE_KEY, DEFAULT_LANGUAGE)
        return code if code in LANGUAGES else DEFAULT_LANGUAGE

    @language.setter
    def language(self, code: str) -> None:
        if code not in LANGUAGES:
            raise ValueError(f"Unsupported language: {code!r}")
        self.store.set_str(LANGUAGE_KEY, code)

    # ------------------------------------------------------------------
    # Bulk access for the dashboard and settings window
    # ------------------------------------------------------------------

    def as_dict(self) -> dict:
        return {
            "work_minutes": self.work_duration,
            "short_break_minutes": self.short_break_duration,
            "long_break_minutes": self.long_break_duration,
            "sessions_until_long_break": self.sessions_until_long_break,
            "daily_goal": self.daily_goal,
            "language": self.language,
        }

    def update(self, values: dict) -> None:
        """Apply any known keys from *values*; unknown keys are ignored.

        Raises ValueError if a numeric field is not an integer or the
        language code is unsupported.
        """
        fields = {
            "work_minutes": WORK_DURATION_KEY,
            "short_break_minutes": SHORT_BREAK_KEY,
            "long_break_minutes": LONG_BREAK_KEY,
            "sessions_until_long_break": SESSIONS_KEY,
            "daily_goal": DAILY_GOAL_KEY,
        }
        parsed: dict[str, int] = {}
        for name, key in fields.items():
            if name in values:
                try:
                    parsed[key] = int(values[name])
                except (TypeError, ValueError):
                    raise ValueError(f"{name} must be an integer") from None

        language = values.get("language")
        if language is not None and language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language!r}")

        for key, value in parsed.items():
            self._set_bounded(key, value)
        if language is not None:
            self.language = language

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_bounded(self, key: str) -> int:
        default, _, _ = BOUNDS[key]
        value = self.store.get_int(key, default)
        return value if value > 0 else default

    def _set_bounded(self, key: str, value: int) -> None:
        _, low, high = BOUNDS[key]
        clamped = max(low, min(high, int(value)))
        if clamped != value:
            logger.info("Clamped %s from %s to %s", key, value, clamped)
        self.store.set_int(key, clamped)

    def _today_string(self) -> str:
        return self._today().isoformat()

    def _reset_if_new_day(self) -> None:
        if self.store.get_str(LAST_DATE_KEY, "") != self._today_string():
            self.store.set_int(COMPLETED_TODAY_KEY, 0)
            self.store.set_str(LAST_DATE_KEY, self._today_string())
