"""
Keyboard input: a raw-mode stdin reader (POSIX terminals) and the mapping
from key presses to application events.
"""
import os
import re
import select
import sys
import termios
import tty
from enum import Enum
from typing import IO, Optional, Union

from ..app import AppendChar, AppEvent, Commit, DeleteChar, EnterEdit, Mode, Quit


class SpecialKey(str, Enum):
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"


KeyPress = Union[SpecialKey, str]

_SPECIAL_CHARS = {
    "\r": SpecialKey.ENTER,
    "\n": SpecialKey.ENTER,
    "\x7f": SpecialKey.BACKSPACE,
    "\x08": SpecialKey.BACKSPACE,
}


# CSI (arrows, function keys, bracketed paste markers) and SS3 sequences.
_ESCAPE_SEQUENCE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|O.)")


def decode_keys(data: str) -> list[KeyPress]:
    """
    Splits raw terminal input into key presses. Escape sequences (arrows,
    function keys) are skipped; any other ESC is the Escape key.
    """
    keys: list[KeyPress] = []
    pos = 0
    while pos < len(data):
        sequence = _ESCAPE_SEQUENCE.match(data, pos)
        if sequence is not None:
            pos = sequence.end()
            continue
        char = data[pos]
        pos += 1
        if char == "\x1b":
            keys.append(SpecialKey.ESCAPE)
            continue
        special = _SPECIAL_CHARS.get(char)
        if special is not None:
            keys.append(special)
        elif char.isprintable():
            keys.append(char)
    return keys


def key_to_event(key: KeyPress, mode: Mode) -> Optional[AppEvent]:
    if mode is Mode.VIEWING:
        if key in (SpecialKey.ESCAPE, "q"):
            return Quit()
        if key == "/":
            return EnterEdit()
        return None

    if key in (SpecialKey.ENTER, SpecialKey.ESCAPE):
        return Commit()
    if key is SpecialKey.BACKSPACE:
        return DeleteChar()
    if isinstance(key, SpecialKey):
        return None
    return AppendChar(key)


class RawKeyReader:
    """Puts the terminal in cbreak mode for the lifetime of the context."""

    def __init__(self, stream: Optional[IO[str]] = None):
        self._stream = stream or sys.stdin
        self._fd: Optional[int] = None
        self._saved_attrs: Optional[list] = None

    def __enter__(self) -> "RawKeyReader":
        self._fd = self._stream.fileno()
        self._saved_attrs = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._fd is not None and self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
        self._fd = None
        self._saved_attrs = None

    def read_keys(self, timeout: float = 0.0) -> list[KeyPress]:
        """Returns the keys pressed since the last call; waits at most `timeout` seconds."""
        if self._fd is None:
            raise RuntimeError("RawKeyReader used outside of its context")
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return []
        data = os.read(self._fd, 64).decode("utf-8", errors="ignore")
        return decode_keys(data)
