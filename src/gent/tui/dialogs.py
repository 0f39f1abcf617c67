"""Select, confirm and input dialogs drawn as overlays on the dashboard.

Each dialog is a small state machine: `content()` renders the current state,
`handle()` consumes one key and either updates the state (returns None) or
resolves the dialog. `run_dialog` drives any of them with the same
render/read loop.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gent.tui.keys import KeyPress, read_key
from gent.tui.layout import (
    BORDER_OVERHEAD,
    SelectEntry,
    confirm_content,
    frame,
    input_content,
    modal_width,
    select_content,
    selectable_values,
    visible_len,
)
from gent.tui.overlay import render_overlay, show_cursor


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    cancelled: bool = False


CANCELLED = Outcome(cancelled=True)


class SelectDialog:
    footer = "↑↓ Navigate  Enter Select  Esc Cancel"

    def __init__(
        self,
        title: str,
        entries: list[SelectEntry],
        initial_index: int = 0,
        current_index: int | None = None,
    ) -> None:
        self.title = title
        self.entries = entries
        self.values = selectable_values(entries)
        self.current_index = current_index
        self.index = initial_index if 0 <= initial_index < len(self.values) else 0

    def content(self, width: int) -> list[str]:
        return select_content(
            self.entries, self.index, width - BORDER_OVERHEAD, self.current_index
        )

    def handle(self, key: KeyPress) -> Outcome | None:
        count = len(self.values)
        if count == 0:
            return CANCELLED if key.name in ("enter", "escape") else None
        if key.name == "up":
            self.index = (self.index - 1) % count
        elif key.name == "down":
            self.index = (self.index + 1) % count
        elif key.name == "enter":
            return Outcome(value=self.values[self.index])
        elif key.name == "escape":
            return CANCELLED
        return None


class ConfirmDialog:
    footer = "←→ Select  Enter Confirm  Esc Cancel"

    def __init__(self, title: str, message: str, default: bool = True) -> None:
        self.title = title
        self.message = message
        self.yes_selected = default

    def content(self, width: int) -> list[str]:
        return confirm_content(self.message, self.yes_selected)

    def handle(self, key: KeyPress) -> Outcome | None:
        if key.name in ("left", "right", "up", "down", "tab"):
            self.yes_selected = not self.yes_selected
        elif key.name == "enter":
            return Outcome(value=self.yes_selected)
        elif key.name == "escape":
            return CANCELLED
        elif key.name in ("y", "Y"):
            return Outcome(value=True)
        elif key.name in ("n", "N"):
            return Outcome(value=False)
        return None


class InputDialog:
    footer = "Enter Submit  Esc Cancel"

    def __init__(self, title: str, label: str, value: str = "") -> None:
        self.title = title
        self.label = label
        self.value = value
        self.cursor_visible = True

    def content(self, width: int) -> list[str]:
        # Keep the tail of long input in view: "> " prefix plus the cursor cell
        max_cells = width - BORDER_OVERHEAD - 3
        shown = self.value
        while shown and visible_len(shown) > max_cells:
            shown = shown[1:]
        return input_content(self.label, shown, self.cursor_visible)

    def handle(self, key: KeyPress) -> Outcome | None:
        if key.name == "enter":
            return Outcome(value=self.value.strip())
        if key.name == "escape":
            return CANCELLED
        if key.name in ("backspace", "delete"):
            self.value = self.value[:-1]
        elif key.name == "paste":
            self.value += key.raw.replace("\r", "").replace("\n", "")
        elif key.is_printable:
            self.value += key.raw
        self.cursor_visible = True
        return None


class MessageDialog:
    footer = "Press any key to continue"

    def __init__(self, title: str, lines: list[str]) -> None:
        self.title = title
        self.lines = lines

    def content(self, width: int) -> list[str]:
        return self.lines

    def handle(self, key: KeyPress) -> Outcome | None:
        return Outcome()


def run_dialog(
    dialog: SelectDialog | ConfirmDialog | InputDialog | MessageDialog,
    dashboard_rows: list[str],
    read: Callable[[], KeyPress] = read_key,
    render: Callable[[list[str], list[str], int], None] | None = None,
) -> Outcome:
    """Render, wait for a key, repeat until the dialog resolves."""
    render = render or render_overlay
    width = modal_width()
    while True:
        rows = frame(dialog.title, dialog.content(width), dialog.footer, width)
        render(dashboard_rows, rows, width)
        outcome = dialog.handle(read())
        if outcome is not None:
            show_cursor()
            return outcome


def show_select(
    title: str,
    entries: list[SelectEntry],
    dashboard_rows: list[str],
    initial_index: int = 0,
    current_index: int | None = None,
    read: Callable[[], KeyPress] = read_key,
) -> str | None:
    """Return the chosen value, or None if cancelled or nothing is selectable."""
    dialog = SelectDialog(title, entries, initial_index, current_index)
    if not dialog.values:
        return None
    outcome = run_dialog(dialog, dashboard_rows, read=read)
    return None if outcome.cancelled else outcome.value


def show_confirm(
    title: str,
    message: str,
    dashboard_rows: list[str],
    default: bool = True,
    read: Callable[[], KeyPress] = read_key,
) -> bool | None:
    """Return True/False, or None if cancelled."""
    outcome = run_dialog(ConfirmDialog(title, message, default), dashboard_rows, read=read)
    return None if outcome.cancelled else outcome.value


def show_input(
    title: str,
    label: str,
    dashboard_rows: list[str],
    read: Callable[[], KeyPress] = read_key,
) -> str | None:
    """Return the entered text (stripped), or None if cancelled."""
    outcome = run_dialog(InputDialog(title, label), dashboard_rows, read=read)
    return None if outcome.cancelled else outcome.value


def show_message(
    title: str,
    lines: list[str],
    dashboard_rows: list[str],
    read: Callable[[], KeyPress] = read_key,
) -> None:
    """Show lines in a dialog until any key is pressed."""
    run_dialog(MessageDialog(title, lines), dashboard_rows, read=read)
