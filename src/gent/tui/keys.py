from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import click

CTRL_C = "\x03"
CTRL_D = "\x04"
# Raw input -> key name. POSIX escape sequences first, then the two-byte
# sequences click.getchar() returns on Windows.
KEY_NAMES = {
    "\x03": "escape",  # Ctrl+C behaves like escape inside dialogs
    "\x1b": "escape",
    "\x1b\x1b": "escape",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[3~": "delete",
    "\x1b[H": "home",
    "\x1b[1~": "home",
    "\x1b[F": "end",
    "\x1b[4~": "end",
    "\x01": "home",  # Ctrl+A
    "\x05": "end",  # Ctrl+E
    "\r": "enter",
    "\n": "enter",
    "\r\n": "enter",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
    "\xe0H": "up",
    "\xe0P": "down",
    "\xe0M": "right",
    "\xe0K": "left",
    "\xe0S": "delete",
    "\x00H": "up",
    "\x00P": "down",
    "\x00M": "right",
    "\x00K": "left",
}


@dataclass(frozen=True)
class KeyPress:
    name: str
    raw: str

    @property
    def is_printable(self) -> bool:
        return len(self.raw) == 1 and self.raw.isprintable()


def decode_key(raw: str) -> KeyPress | None:
    """Name a raw input chunk. Returns None for sequences we don't handle."""
    name = KEY_NAMES.get(raw)
    if name is not None:
        return KeyPress(name=name, raw=raw)
    if len(raw) == 1 and raw.isprintable():
        return KeyPress(name=raw, raw=raw)
    pasted = raw.replace("\r", "").replace("\n", "")
    if len(raw) > 1 and not raw.startswith("\x1b") and pasted.isprintable():
        # Several characters in one read: a paste. Terminals send newlines as \r
        return KeyPress(name="paste", raw=raw)
    return None


def read_key(getchar: Callable[[], str] = click.getchar) -> KeyPress:
    """Block until one recognised key event arrives.

    Unrecognised input is dropped and reading continues. click turns Ctrl+C
    and Ctrl+D into exceptions; both come back as escape.
    """
    while True:
        try:
            raw = getchar()
        except KeyboardInterrupt:
            return KeyPress(name="escape", raw=CTRL_C)
        except EOFError:
            return KeyPress(name="escape", raw=CTRL_D)
        key = decode_key(raw)
        if key is not None:
            return key
