"""Settings window for Pomobar.

Single-pane settings UI built with tkinter + ttk for platforms where the
tray cannot host the web dashboard comfortably.  Holds the duration
steppers, the long-break cadence, the daily goal and the language.
"""

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Any, Callable

from pomobar.core.i18n import Localizer
from pomobar.core.settings import (
    BOUNDS,
    DAILY_GOAL_KEY,
    LONG_BREAK_KEY,
    SESSIONS_KEY,
    SHORT_BREAK_KEY,
    WORK_DURATION_KEY,
)

logger = logging.getLogger(__name__)

# (settings field, translation key, bounds key, unit suffix)
FIELDS = (
    ("work_minutes", "focusDuration", WORK_DURATION_KEY, "min"),
    ("short_break_minutes", "shortBreakDuration", SHORT_BREAK_KEY, "min"),
    ("long_break_minutes", "longBreakDuration", LONG_BREAK_KEY, "min"),
    ("sessions_until_long_break", "sessionsBeforeLong", SESSIONS_KEY, ""),
    ("daily_goal", "dailyGoal", DAILY_GOAL_KEY, ""),
)


def _apply_theme(style: ttk.Style) -> None:
    """Apply a minimalistic flat theme with muted colors and system fonts."""
    style.theme_use("clam")

    bg = "#f5f5f5"
    fg = "#333333"
    accent = "#5a7d9a"
    field_bg = "#ffffff"
    border = "#cccccc"
    button_bg = "#e8e8e8"

    style.configure(".", background=bg, foreground=fg, borderwidth=0,
                    focusthickness=0, font=("TkDefaultFont", 10))
    style.configure("TFrame", background=bg)
    style.configure("TLabel", background=bg, foreground=fg)
    style.configure("TButton", background=button_bg, foreground=fg,
                    borderwidth=1, relief="flat", padding=(10, 4))
    style.map("TButton",
              background=[("active", accent)],
              foreground=[("active", "#ffffff")])
    style.configure("Accent.TButton", background=accent, foreground="#ffffff")
    style.map("Accent.TButton",
              background=[("active", "#4a6d8a")])
    style.configure("TSpinbox", fieldbackground=field_bg, foreground=fg,
                    bordercolor=border)
    style.configure("TCombobox", fieldbackground=field_bg, foreground=fg,
                    bordercolor=border)


class SettingsWindow:
    """Preference editor; hands the edited values to *on_save*."""

    def __init__(
        self,
        values: dict[str, Any],
        localizer: Localizer,
        on_save: Callable[[dict[str, Any]], None],
    ):
        self.values = dict(values)
        self.L = localizer
        self.on_save = on_save
        self._window: tk.Toplevel | None = None
        self._spinboxes: dict[str, Any] = {}
        self._language = None
        self._language_codes: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def show(self) -> None:
        """Display the settings window."""
        L = self.L
        self._window = tk.Toplevel()
        win = self._window
        win.title(f"Pomobar {L.get('settings')}")
        win.resizable(False, False)
        win.configure(bg="#f5f5f5")

        style = ttk.Style(win)
        _apply_theme(style)

        frame = ttk.Frame(win)
        frame.pack(fill="both", expand=True, padx=12, pady=12)
        self._build_fields(frame)

        btn_frame = ttk.Frame(win)
        btn_frame.pack(fill="x", padx=12, pady=(4, 12))
        ttk.Button(btn_frame, text=L.get("cancel"), command=win.destroy).pack(side="right", padx=(6, 0))
        ttk.Button(btn_frame, text=L.get("save"), style="Accent.TButton",
                   command=self._save).pack(side="right")

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_fields(self, parent) -> None:
        pad = {"padx": 10, "pady": 4}
        row = 0

        for field, label_key, bounds_key, suffix in FIELDS:
            default, low, high = BOUNDS[bounds_key]
            ttk.Label(parent, text=f"{self.L.get(label_key)}:").grid(row=row, column=0, sticky="w", **pad)
            spin = ttk.Spinbox(parent, from_=low, to=high, width=6)
            spin.set(self.values.get(field, default))
            spin.grid(row=row, column=1, sticky="w", **pad)
            if suffix:
                ttk.Label(parent, text=suffix).grid(row=row, column=2, sticky="w")
            self._spinboxes[field] = spin
            row += 1

        self._language_codes = {name: code for code, name in self.L.available_languages().items()}
        ttk.Label(parent, text=f"{self.L.get('language')}:").grid(row=row, column=0, sticky="w", **pad)
        self._language = ttk.Combobox(parent, values=list(self._language_codes), state="readonly", width=12)
        current = self.values.get("language", self.L.language)
        for name, code in self._language_codes.items():
            if code == current:
                self._language.set(name)
        self._language.grid(row=row, column=1, columnspan=2, sticky="w", **pad)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def collect(self) -> dict[str, Any]:
        """Read the widgets into a settings dict.

        Raises ValueError if a spinbox does not hold an integer.
        """
        updated: dict[str, Any] = {}
        for field, spin in self._spinboxes.items():
            try:
                updated[field] = int(spin.get())
            except (TypeError, ValueError):
                raise ValueError(f"{field} must be an integer") from None
        if self._language is not None:
            code = self._language_codes.get(self._language.get())
            if code:
                updated["language"] = code
        return updated

    def _save(self) -> None:
        """Validate inputs and call the on_save callback."""
        try:
            updated = self.collect()
            self.on_save(updated)
        except ValueError as exc:
            messagebox.showerror("Invalid", str(exc), parent=self._window)
            return

        if self._window is not None:
            self._window.destroy()
