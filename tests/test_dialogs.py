from __future__ import annotations

from unittest.mock import patch

import pytest

from gent.tui.dialogs import (
    ConfirmDialog,
    InputDialog,
    SelectDialog,
    run_dialog,
    show_confirm,
    show_input,
    show_message,
    show_select,
)
from gent.tui.keys import KeyPress, decode_key
from gent.tui.layout import BORDER_OVERHEAD, SelectItem, SelectSeparator, visible_len


@pytest.fixture(autouse=True)
def _no_terminal_output():
    with patch("gent.tui.dialogs.render_overlay"), patch("gent.tui.dialogs.show_cursor"):
        yield


def keys(*raws):
    """A read() that replays raw key input."""
    it = iter(raws)
    return lambda: decode_key(next(it))


UP, DOWN, LEFT, ENTER, ESC, BACKSPACE = "\x1b[A", "\x1b[B", "\x1b[D", "\r", "\x1b", "\x7f"

ENTRIES = [
    SelectSeparator("Providers"),
    SelectItem("Claude", "claude"),
    SelectItem("Gemini", "gemini"),
    SelectItem("Codex", "codex"),
]


def test_select_enter_returns_value():
    assert show_select("AI", ENTRIES, [], read=keys(DOWN, ENTER)) == "gemini"


def test_select_wraps_upwards():
    assert show_select("AI", ENTRIES, [], read=keys(UP, ENTER)) == "codex"


def test_select_wraps_downwards():
    assert show_select("AI", ENTRIES, [], read=keys(DOWN, DOWN, DOWN, ENTER)) == "claude"


def test_select_initial_index():
    assert show_select("AI", ENTRIES, [], initial_index=2, read=keys(ENTER)) == "codex"


def test_select_escape_cancels():
    assert show_select("AI", ENTRIES, [], read=keys(DOWN, ESC)) is None


def test_select_ignores_other_keys():
    assert show_select("AI", ENTRIES, [], read=keys("x", "q", ENTER)) == "claude"


def test_select_nothing_selectable():
    read = keys()
    assert show_select("AI", [SelectSeparator("empty")], [], read=read) is None


def test_select_dialog_without_values_cancels_on_enter():
    dialog = SelectDialog("AI", [SelectSeparator("empty")])
    assert dialog.handle(KeyPress("enter", "\r")).cancelled


def test_confirm_default_yes():
    assert show_confirm("Push", "Push?", [], read=keys(ENTER)) is True


def test_confirm_toggle():
    assert show_confirm("Push", "Push?", [], read=keys(LEFT, ENTER)) is False


def test_confirm_letter_shortcuts():
    assert show_confirm("Push", "Push?", [], default=False, read=keys("y")) is True
    assert show_confirm("Push", "Push?", [], read=keys("n")) is False


def test_confirm_escape_is_cancel():
    assert show_confirm("Push", "Push?", [], read=keys(ESC)) is None


def test_input_typing_and_backspace():
    assert show_input("Name", "Name:", [], read=keys("a", "b", "c", BACKSPACE, ENTER)) == "ab"


def test_input_paste_strips_newlines():
    assert show_input("Name", "Name:", [], read=keys("fix the\nbug", ENTER)) == "fix thebug"


def test_input_paste_with_carriage_returns():
    assert show_input("Name", "Name:", [], read=keys("fix the\rbug", ENTER)) == "fix thebug"


def test_input_result_is_stripped():
    assert show_input("Name", "Name:", [], read=keys(" ", "a", " ", ENTER)) == "a"


def test_input_escape_cancels():
    assert show_input("Name", "Name:", [], read=keys("a", ESC)) is None


def test_input_keeps_tail_in_view():
    dialog = InputDialog("Name", "Name:", value="x" * 100 + "END")
    rows = dialog.content(30)
    assert "END" in rows[2]


def test_input_keeps_wide_tail_in_view():
    dialog = InputDialog("Name", "Name:", value="\u65e5\u672c" * 40 + "END")
    width = 30
    row = dialog.content(width)[2]
    assert "END" in row
    assert visible_len(row) <= width - BORDER_OVERHEAD


def test_message_any_key():
    read = keys("z")
    show_message("Done", ["ok"], [], read=read)


def test_run_dialog_renders_each_state():
    rendered = []
    dialog = ConfirmDialog("Push", "Push?")
    run_dialog(
        dialog,
        ["dashboard"],
        read=keys(LEFT, LEFT, ENTER),
        render=lambda dash, rows, width: rendered.append(rows),
    )
    assert len(rendered) == 3
    assert all(len(rows) == len(rendered[0]) for rows in rendered)
