"""Screen painting: now-playing banner, control row, and status line."""

import sys
import threading
import time
from collections.abc import Callable
from typing import TextIO

from .config import MESSAGE_SECONDS
from .input_state import Selection
from .playback import NowPlaying
from .terminal import terminal_size

NO_SONG_PLAYING = "No song playing"
ELLIPSIS = "…"

GREEN = "\033[32m"
RESET = "\033[0m"
CLEAR_LINE = "\033[2K"
CLEAR_SCREEN = "\033[2J\033[H"

# Label for each selection and the share of the width its centre sits at.
CONTROL_LAYOUT = (
    (Selection.SKIP_BACK, "<-", 1 / 4),
    (Selection.PAUSE, "Pause", 1 / 2),
    (Selection.SKIP_FORWARD, "->", 3 / 4),
)


def move_to(column: int, row: int) -> str:
    return f"\033[{max(0, row) + 1};{max(0, column) + 1}H"


def format_now_playing(now_playing: NowPlaying | None, width: int) -> str:
    """Build the banner text, truncated to fit inside the banner borders."""
    text = f"{now_playing.song} - {now_playing.artist}" if now_playing else NO_SONG_PLAYING
    # Two border columns plus one column of padding on each side.
    available = max(1, width - 4)
    if len(text) > available:
        text = text[: available - 1] + ELLIPSIS
    return text


class DisplayCache:
    """Last rendered now-playing line and terminal width.

    Both fields change together under one lock so a redraw decision and its
    bookkeeping cannot interleave with another render call.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._last_line: str | None = None
        self._last_width = 0

    @property
    def last_line(self) -> str | None:
        with self._lock:
            return self._last_line

    @property
    def last_width(self) -> int:
        with self._lock:
            return self._last_width

    def should_redraw(self, line: str, width: int) -> bool:
        """Record ``line``/``width`` and report whether they differ from last time."""
        with self._lock:
            if line == self._last_line and width == self._last_width:
                return False
            self._last_line = line
            self._last_width = width
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._last_line = None


class Renderer:
    def __init__(
        self,
        cache: DisplayCache | None = None,
        stream: TextIO | None = None,
        size: Callable[[], tuple[int, int]] = terminal_size,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cache = cache or DisplayCache()
        self.stream = stream or sys.stdout
        self._size = size
        self._clock = clock
        self._message_until: float | None = None

    def render_now_playing(self, now_playing: NowPlaying | None) -> bool:
        """Draw the banner when its text or the width changed; return whether it drew."""
        width, _ = self._size()
        line = format_now_playing(now_playing, width)
        if not self.cache.should_redraw(line, width):
            return False

        border = "─" * max(0, width - 2)
        column = max(1, (width - len(line)) // 2)
        out = [
            move_to(0, 0), CLEAR_LINE, "┌", border, "┐",
            move_to(0, 1), CLEAR_LINE, "│", move_to(column, 1), line, move_to(width - 1, 1), "│",
            move_to(0, 2), CLEAR_LINE, "└", border, "┘",
        ]
        self._write("".join(out))
        return True

    def render_controls(self, selected: Selection) -> None:
        """Draw the three boxed controls, highlighting ``selected``."""
        width, height = self._size()
        row = height // 2
        out: list[str] = []
        for selection, label, share in CONTROL_LAYOUT:
            left = int(width * share) - len(label) // 2 - 1
            edge = "─" * len(label)
            if selection is selected:
                out.append(GREEN)
            out += [
                move_to(left, row - 1), "┌", edge, "┐",
                move_to(left, row), "│", label, "│",
                move_to(left, row + 1), "└", edge, "┘",
                RESET,
            ]
        self._write("".join(out))

    def render_status(self, text: str) -> None:
        """Rewrite the bottom line: the mode name or the command being typed."""
        _, height = self._size()
        self._write(f"{move_to(0, height - 1)}{CLEAR_LINE}{text}")

    def show_message(self, text: str) -> None:
        """Write a one-off message two rows above the status line for a few seconds."""
        self._write(f"{self._message_position()}{CLEAR_LINE}{text}")
        self._message_until = self._clock() + MESSAGE_SECONDS

    def expire_message(self) -> bool:
        """Erase the message once its time is up; return whether it was erased."""
        if self._message_until is None or self._clock() < self._message_until:
            return False
        self.clear_message()
        return True

    def clear_message(self) -> None:
        if self._message_until is None:
            return
        self._message_until = None
        self._write(f"{self._message_position()}{CLEAR_LINE}")

    def _message_position(self) -> str:
        _, height = self._size()
        return move_to(0, height - 3)

    def clear(self) -> None:
        """Blank the screen and forget the banner so the next fetch redraws it."""
        self.cache.invalidate()
        self._message_until = None
        self._write(CLEAR_SCREEN)

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
