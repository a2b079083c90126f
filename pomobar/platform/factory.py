"""Factory for creating the appropriate Notifier for the current OS."""

import sys

from pomobar.platform.base import Notifier


def create_notifier() -> Notifier:
    """Detect the current OS and return the matching Notifier.

    Uses lazy imports so platform-specific modules are only loaded on
    the OS where they are actually needed.

    Returns:
        A concrete Notifier for the current platform.

    Raises:
        OSError: If the current platform is not supported.
    """
    if sys.platform == "darwin":
        from pomobar.platform.macos import MacOSNotifier
        return MacOSNotifier()

    if sys.platform == "win32":
        from pomobar.platform.windows import WindowsNotifier
        return WindowsNotifier()

    if sys.platform.startswith("linux"):
        from pomobar.platform.linux import LinuxNotifier
        return LinuxNotifier()

    raise OSError(
        f"Unsupported platform: {sys.platform!r}. "
        "Pomobar supports macOS (darwin), Windows (win32) and Linux."
    )
