"""Abstract base class for platform-specific sound and alert delivery."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Common interface for end-of-session feedback.

    Each supported platform (macOS, Windows, Linux) provides a concrete
    implementation that uses OS-specific tools behind this interface.
    Implementations must not block the caller and must not raise.
    """

    @abstractmethod
    def play_sound(self, name: str) -> None:
        """Play the named system sound (e.g. ``"Glass"``)."""
        pass

    @abstractmethod
    def alert(self, title: str, message: str, button: str = "OK") -> None:
        """Show an informational message to the user."""
        pass
