"""Painting dialogs over the dashboard with absolute cursor positioning."""

from __future__ import annotations

import shutil

import click

from gent.tui.layout import frame, modal_width, strip_ansi

CLEAR_SCREEN = "\x1b[2J\x1b[H"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def move_to(row: int, col: int) -> str:
    """Cursor-position escape; row and col are 1-based."""
    return f"\x1b[{row};{col}H"


def overlay_origin(
    dialog_height: int, width: int, columns: int, rows: int
) -> tuple[int, int]:
    """Top-left (row, col) that centres a dialog on the screen."""
    top = max(1, (rows - dialog_height) // 2)
    left = max(1, (columns - width) // 2)
    return top, left


def compose_overlay(
    dashboard_rows: list[str],
    dialog_rows: list[str],
    width: int,
    columns: int,
    rows: int,
) -> str:
    """Build the escape stream for one repaint: dimmed dashboard, then dialog.

    Dashboard rows beyond the screen height are dropped. The dialog overwrites
    only its own rectangle; the cursor is parked on the line below it.
    """
    out = [CLEAR_SCREEN, HIDE_CURSOR]
    for i, line in enumerate(dashboard_rows[:rows]):
        out.append(move_to(i + 1, 1) + click.style(strip_ansi(line), dim=True))

    top, left = overlay_origin(len(dialog_rows), width, columns, rows)
    for i, line in enumerate(dialog_rows):
        out.append(move_to(top + i, left) + line)
    out.append(move_to(top + len(dialog_rows) + 1, 1))
    return "".join(out)


def render_overlay(dashboard_rows: list[str], dialog_rows: list[str], width: int) -> None:
    size = shutil.get_terminal_size((80, 24))
    click.echo(
        compose_overlay(dashboard_rows, dialog_rows, width, size.columns, size.lines),
        nl=False,
    )


def show_cursor() -> None:
    click.echo(SHOW_CURSOR, nl=False)


def show_status(title: str, message: str, dashboard_rows: list[str]) -> None:
    """Paint a one-line status message; the caller decides when to repaint."""
    width = modal_width()
    render_overlay(dashboard_rows, frame(title, [message], "", width), width)
