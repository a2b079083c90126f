"""macOS notifier using afplay and AppleScript (osascript)."""

import logging
import subprocess
from pathlib import Path

from pomobar.platform.base import Notifier

logger = logging.getLogger(__name__)

_SYSTEM_SOUNDS = Path("/System/Library/Sounds")


class MacOSNotifier(Notifier):
    """Plays ``/System/Library/Sounds`` files and shows native dialogs."""

    def play_sound(self, name: str) -> None:
        sound_path = _SYSTEM_SOUNDS / f"{name}.aiff"
        if not sound_path.exists():
            logger.debug("System sound %s not found, using beep", sound_path)
            self._popen(["osascript", "-e", "beep"])
            return
        self._popen(["afplay", str(sound_path)])

    def alert(self, title: str, message: str, button: str = "OK") -> None:
        script = (
            f'display dialog "{_escape(message)}" '
            f'with title "{_escape(title)}" '
            f'buttons {{"{_escape(button)}"}} default button "{_escape(button)}" '
            f"with icon note"
        )
        self._popen(["osascript", "-e", script])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _popen(cmd: list[str]) -> None:
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            logger.warning("Failed to run %s: %s", cmd[0], exc)


def _escape(text: str) -> str:
    """Escape backslashes and double quotes for an AppleScript string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')
