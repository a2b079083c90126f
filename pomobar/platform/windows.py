"""Windows notifier using winsound and user32 MessageBoxW via ctypes."""

import ctypes
import logging
import threading

from pomobar.platform.base import Notifier

logger = logging.getLogger(__name__)

# MessageBoxW flags
_MB_OK = 0x00000000
_MB_ICONINFORMATION = 0x00000040
_MB_SETFOREGROUND = 0x00010000

# macOS sound names used in config.json mapped onto Windows system aliases.
_SOUND_ALIASES = {
    "Glass": "SystemAsterisk",
    "Funk": "SystemExclamation",
}
_DEFAULT_ALIAS = "SystemDefault"


class WindowsNotifier(Notifier):
    """Plays system sound aliases and shows a message box.

    ``MessageBoxW`` blocks until dismissed, so it runs on a daemon thread.
    """

    def __init__(self) -> None:
        try:
            self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]
        except (AttributeError, OSError) as exc:
            logger.warning("user32.dll unavailable: %s", exc)
            self._user32 = None

    def play_sound(self, name: str) -> None:
        try:
            import winsound

            alias = _SOUND_ALIASES.get(name, _DEFAULT_ALIAS)
            winsound.PlaySound(alias, winsound.SND_ALIAS | winsound.SND_ASYNC)
        except (ImportError, RuntimeError) as exc:
            logger.warning("Could not play sound %s: %s", name, exc)

    def alert(self, title: str, message: str, button: str = "OK") -> None:
        if self._user32 is None:
            logger.info("%s: %s", title, message)
            return

        flags = _MB_OK | _MB_ICONINFORMATION | _MB_SETFOREGROUND

        def _show() -> None:
            try:
                self._user32.MessageBoxW(None, message, title, flags)
            except OSError:
                logger.exception("MessageBoxW failed")

        threading.Thread(target=_show, daemon=True, name="pomobar-alert").start()
