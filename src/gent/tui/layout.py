"""Fixed-width text layout for modal dialogs.

Everything here is pure: functions take content and a width and return
styled rows. Widths are always measured on the *visible* text (ANSI escapes
stripped, wide glyphs counted as two cells), so every row a builder returns
occupies exactly the requested number of terminal cells.
"""

from __future__ import annotations

import re
import shutil
from dataclasses import dataclass

import click
from rich.cells import cell_len, get_character_cell_size

ELLIPSIS = "…"
MAX_MODAL_WIDTH = 60
MIN_MODAL_WIDTH = 20
# "│ " + content + " │"
BORDER_OVERHEAD = 4
# "> " indicator + "· " bullet
SELECT_OVERHEAD = 4

_ANSI_SPLIT = re.compile(r"(\x1b\[[;?0-9]*[a-zA-Z])")
_RESET = "\x1b[0m"


@dataclass(frozen=True)
class SelectItem:
    name: str
    value: str


@dataclass(frozen=True)
class SelectSeparator:
    label: str


SelectEntry = SelectItem | SelectSeparator


def strip_ansi(text: str) -> str:
    return click.unstyle(text)


def visible_len(text: str) -> int:
    return cell_len(strip_ansi(text))


def truncate_ansi(text: str, width: int) -> str:
    """Cut `text` to `width` visible cells, ending in a single ellipsis.

    Escape sequences are kept intact. Text that already fits is returned
    unchanged.
    """
    if visible_len(text) <= width:
        return text
    if width <= 0:
        return ""

    budget = width - 1
    used = 0
    styled = False
    out: list[str] = []
    for part in _ANSI_SPLIT.split(text):
        if not part:
            continue
        if _ANSI_SPLIT.fullmatch(part):
            out.append(part)
            styled = True
            continue
        for char in part:
            size = get_character_cell_size(char)
            if used + size > budget:
                break
            out.append(char)
            used += size
        else:
            continue
        break

    # A wide glyph that didn't fit leaves a one-cell gap
    out.append(" " * (budget - used))
    out.append(ELLIPSIS)
    if styled:
        out.append(_RESET)
    return "".join(out)


def fit(text: str, width: int) -> str:
    """Truncate or right-pad `text` to exactly `width` visible cells."""
    fitted = truncate_ansi(text, width)
    return fitted + " " * max(0, width - visible_len(fitted))


def modal_width(columns: int | None = None) -> int:
    if columns is None:
        columns = shutil.get_terminal_size((80, 24)).columns
    return max(MIN_MODAL_WIDTH, min(MAX_MODAL_WIDTH, columns - 4))


# -- Frame builders --


def _border(text: str) -> str:
    return click.style(text, bold=True)


def _top_row(title: str, width: int) -> str:
    label = truncate_ansi(f" {title} ", width - 2)
    fill = width - 2 - visible_len(label)
    return (
        _border("┌")
        + click.style(label, fg="cyan", bold=True)
        + _border("─" * fill + "┐")
    )


def _divider_row(width: int) -> str:
    return _border("├" + "─" * (width - 2) + "┤")


def _bottom_row(width: int) -> str:
    return _border("└" + "─" * (width - 2) + "┘")


def content_row(text: str, width: int) -> str:
    return _border("│") + " " + fit(text, width - BORDER_OVERHEAD) + " " + _border("│")


def frame(title: str, content: list[str], footer: str, width: int) -> list[str]:
    """Wrap content rows in a titled box with a footer.

    Layout: top border, blank, content..., blank, divider, footer, bottom.
    """
    rows = [_top_row(title, width), content_row("", width)]
    rows.extend(content_row(line, width) for line in content)
    rows.append(content_row("", width))
    rows.append(_divider_row(width))
    rows.append(content_row(click.style(footer, dim=True) if footer else "", width))
    rows.append(_bottom_row(width))
    return rows


# -- Dialog content builders --


def select_content(
    entries: list[SelectEntry],
    selected_index: int,
    width: int,
    current_index: int | None = None,
) -> list[str]:
    """One row per entry. Separators take no slot in the selectable index."""
    rows: list[str] = []
    selectable_idx = 0
    for entry in entries:
        if isinstance(entry, SelectSeparator):
            rows.append(click.style(truncate_ansi(entry.label, width), dim=True))
        elif isinstance(entry, SelectItem):
            is_selected = selectable_idx == selected_index
            is_current = current_index is not None and selectable_idx == current_index
            label = truncate_ansi(entry.name, width - SELECT_OVERHEAD)
            if is_selected:
                prefix = click.style("> ", fg="cyan", bold=True)
                label = click.style(label, bold=True)
            elif is_current:
                prefix = click.style("* ", fg="cyan")
                label = click.style(label, fg="cyan")
            else:
                prefix = "  "
            rows.append(prefix + click.style("· ", dim=True) + label)
            selectable_idx += 1
        else:
            raise TypeError(f"Not a select entry: {entry!r}")
    return rows


def selectable_values(entries: list[SelectEntry]) -> list[str]:
    return [e.value for e in entries if isinstance(e, SelectItem)]


def confirm_content(message: str, yes_selected: bool) -> list[str]:
    if yes_selected:
        yes = click.style("> Yes", fg="cyan", bold=True)
        no = click.style("  No", dim=True)
    else:
        yes = click.style("  Yes", dim=True)
        no = click.style("> No", fg="cyan", bold=True)
    return [message, "", yes, no]


def input_content(label: str, value: str, cursor_visible: bool) -> list[str]:
    cursor = click.style(" ", reverse=True) if cursor_visible else ""
    return [label, "", click.style("> ", fg="cyan") + value + cursor]
