"""Linux notifier using PulseAudio/ALSA players and notify-send."""

import logging
import shutil
import subprocess

from pomobar.platform.base import Notifier

logger = logging.getLogger(__name__)

_FREEDESKTOP_SOUNDS = {
    "Glass": "/usr/share/sounds/freedesktop/stereo/complete.oga",
    "Funk": "/usr/share/sounds/freedesktop/stereo/bell.oga",
}
_DEFAULT_SOUND = "/usr/share/sounds/freedesktop/stereo/message.oga"


class LinuxNotifier(Notifier):
    """Best-effort feedback on freedesktop desktops.

    Falls back to the terminal bell when no audio player is installed and
    to the log when ``notify-send`` is missing.
    """

    def play_sound(self, name: str) -> None:
        path = _FREEDESKTOP_SOUNDS.get(name, _DEFAULT_SOUND)
        for player in ("paplay", "pw-play"):
            if shutil.which(player):
                self._popen([player, path])
                return
        print("\a", end="", flush=True)

    def alert(self, title: str, message: str, button: str = "OK") -> None:
        if shutil.which("notify-send") is None:
            logger.info("%s: %s", title, message)
            return
        self._popen(["notify-send", "--app-name=Pomobar", title, message])

    @staticmethod
    def _popen(cmd: list[str]) -> None:
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            logger.warning("Failed to run %s: %s", cmd[0], exc)
