"""French/English string table for the tray menu, dashboard and alerts."""

import logging

from pomobar.core.events import LANGUAGE_CHANGED, EventBus
from pomobar.core.models import SessionType
from pomobar.core.settings import LANGUAGES, Settings

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "fr": "Français",
    "en": "English",
}

TRANSLATIONS: dict[str, dict[str, str]] = {
    # Session types
    "focus": {"fr": "Focus", "en": "Focus"},
    "shortBreak": {"fr": "Pause", "en": "Break"},
    "longBreak": {"fr": "Pause longue", "en": "Long Break"},

    # Buttons
    "start": {"fr": "Start", "en": "Start"},
    "pause": {"fr": "Pause", "en": "Pause"},
    "resume": {"fr": "Resume", "en": "Resume"},
    "reset": {"fr": "Reset", "en": "Reset"},
    "skip": {"fr": "Skip", "en": "Skip"},
    "quit": {"fr": "Quitter", "en": "Quit"},
    "dashboard": {"fr": "Tableau de bord", "en": "Dashboard"},

    # Settings
    "settings": {"fr": "Paramètres", "en": "Settings"},
    "focusDuration": {"fr": "Focus", "en": "Focus"},
    "shortBreakDuration": {"fr": "Pause courte", "en": "Short Break"},
    "longBreakDuration": {"fr": "Pause longue", "en": "Long Break"},
    "sessionsBeforeLong": {"fr": "Sessions avant pause longue", "en": "Sessions before long break"},
    "dailyGoal": {"fr": "Objectif journalier", "en": "Daily Goal"},
    "language": {"fr": "Langue", "en": "Language"},
    "save": {"fr": "Enregistrer", "en": "Save"},
    "cancel": {"fr": "Annuler", "en": "Cancel"},

    # Tasks
    "tasks": {"fr": "Tâches", "en": "Tasks"},
    "newTask": {"fr": "Nouvelle tâche...", "en": "New task..."},
    "clearCompleted": {"fr": "Effacer terminées", "en": "Clear completed"},
    "noTasks": {"fr": "Aucune tâche", "en": "No tasks"},

    # Goal messages
    "goalReached": {"fr": "🎉 Objectif atteint!", "en": "🎉 Goal reached!"},
    "sessions": {"fr": "sessions", "en": "sessions"},
    "remainingGoal": {"fr": "Encore %d pour atteindre ton objectif", "en": "%d more to reach your goal"},
    "exceededGoal": {"fr": "Tu as dépassé ton objectif! 💪", "en": "You exceeded your goal! 💪"},
    "resetDay": {"fr": "Réinitialiser la journée", "en": "Reset day"},

    # Notifications
    "sessionComplete": {"fr": "✅ Session terminée!", "en": "✅ Session complete!"},
    "letsGo": {"fr": "💪 C'est reparti!", "en": "💪 Let's go!"},
    "goalReachedTitle": {"fr": "🎉 Objectif atteint!", "en": "🎉 Goal reached!"},
    "goalReachedMessage": {
        "fr": "Félicitations! Tu as atteint ton objectif du jour!\nContinue comme ça 💪",
        "en": "Congratulations! You reached your daily goal!\nKeep it up 💪",
    },
    "great": {"fr": "Super!", "en": "Great!"},
}

_SESSION_KEYS = {
    SessionType.WORK: "focus",
    SessionType.SHORT_BREAK: "shortBreak",
    SessionType.LONG_BREAK: "longBreak",
}


class Localizer:
    """Looks up UI strings in the language stored in the user's settings."""

    def __init__(self, settings: Settings, events: EventBus) -> None:
        self.settings = settings
        self.events = events

    @property
    def language(self) -> str:
        return self.settings.language

    @language.setter
    def language(self, code: str) -> None:
        if code == self.settings.language:
            return
        self.settings.language = code
        logger.info("Language changed to %s", code)
        self.events.emit(LANGUAGE_CHANGED, code)

    @staticmethod
    def available_languages() -> dict[str, str]:
        return {code: LANGUAGE_NAMES[code] for code in LANGUAGES}

    def get(self, key: str, *args) -> str:
        """Return the translation of *key*; unknown keys come back unchanged."""
        entry = TRANSLATIONS.get(key)
        text = entry.get(self.language, key) if entry else key
        if args:
            return text % args
        return text

    def session_name(self, session_type: SessionType) -> str:
        return self.get(_SESSION_KEYS[session_type])
