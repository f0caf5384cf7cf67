import codecs
import os
import select
import shutil
import sys
from collections import deque
from dataclasses import dataclass

from .errors import TerminalError

try:
    import termios
    import tty
except ImportError:
    termios = None
    tty = None

ENTER = "enter"
ESCAPE = "esc"
BACKSPACE = "backspace"
LEFT = "left"
RIGHT = "right"
UP = "up"
DOWN = "down"
UNKNOWN = "unknown"

ARROW_KEYS = {"A": UP, "B": DOWN, "C": RIGHT, "D": LEFT}
READ_CHUNK = 64


@dataclass(frozen=True)
class KeyEvent:
    """One key press: a printable character or a named key, plus Ctrl."""

    key: str
    ctrl: bool = False

    @property
    def is_printable(self) -> bool:
        return len(self.key) == 1 and not self.ctrl and self.key.isprintable()


def decode_keys(data: str) -> list[KeyEvent]:
    """Split raw terminal input into key events.

    Escape sequences other than the arrow keys decode to UNKNOWN so callers
    can ignore them.
    """
    events: list[KeyEvent] = []
    index = 0
    while index < len(data):
        char = data[index]
        index += 1

        if char in ("\r", "\n"):
            events.append(KeyEvent(ENTER))
        elif char in ("\x7f", "\b"):
            events.append(KeyEvent(BACKSPACE))
        elif char == "\x1b":
            if index < len(data) and data[index] in "[O":
                # CSI/SS3: parameters then one final byte in @..~
                end = index + 1
                while end < len(data) and not ("@" <= data[end] <= "~"):
                    end += 1
                final = data[end] if end < len(data) else ""
                events.append(KeyEvent(ARROW_KEYS.get(final, UNKNOWN)))
                index = end + 1
            else:
                events.append(KeyEvent(ESCAPE))
        elif "\x01" <= char <= "\x1a" and char != "\t":
            events.append(KeyEvent(chr(ord(char) + 96), ctrl=True))
        else:
            events.append(KeyEvent(char))
    return events


def terminal_size() -> tuple[int, int]:
    size = shutil.get_terminal_size(fallback=(80, 24))
    return size.columns, size.lines


class Terminal:
    """Raw-mode stdin/stdout with non-blocking key polling.

    Used as a context manager: entering switches to raw mode and clears the
    screen, leaving restores the saved terminal attributes on every path.
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._saved_attrs = None
        self._pending: deque[KeyEvent] = deque()
        # Keeps a multibyte character split across reads until its last byte arrives.
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __enter__(self) -> "Terminal":
        if termios is None or tty is None:
            raise TerminalError("Raw terminal input is not supported on this platform")
        if not self.stdin.isatty():
            raise TerminalError("stdin is not a terminal")

        fd = self.stdin.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        # Raw (not cbreak) so Ctrl+C arrives as a key instead of SIGINT.
        tty.setraw(fd)
        self.stdout.write("\033[?25l\033[2J\033[H")
        self.stdout.flush()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.stdout.write("\033[0m\033[2J\033[H\033[?25h")
            self.stdout.flush()
        finally:
            if self._saved_attrs is not None:
                termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
                self._saved_attrs = None

    def poll_key(self, timeout: float) -> KeyEvent | None:
        """Wait up to ``timeout`` seconds for a key; None when nothing arrived."""
        if self._pending:
            return self._pending.popleft()

        ready, _, _ = select.select([self.stdin], [], [], max(0.0, timeout))
        if not ready:
            return None

        # One read picks up a whole escape sequence when the terminal sent one.
        data = self._decoder.decode(os.read(self.stdin.fileno(), READ_CHUNK))
        self._pending.extend(decode_keys(data))
        return self._pending.popleft() if self._pending else None
