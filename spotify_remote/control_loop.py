"""Top-level loop: race key input against the now-playing ticker, then repaint."""

import logging
import time
from collections.abc import Callable

from .config import INPUT_POLL_SECONDS, NOW_PLAYING_INTERVAL_SECONDS
from .display import Renderer
from .input_state import InputStateMachine
from .playback import PlaybackClient
from .terminal import Terminal

logger = logging.getLogger(__name__)


class Ticker:
    """Fixed-interval deadline; the first tick is due immediately."""

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._next_at = clock()

    def remaining(self) -> float:
        return max(0.0, self._next_at - self._clock())

    def consume(self) -> bool:
        """Return True and schedule the next tick if one is due."""
        now = self._clock()
        if now < self._next_at:
            return False
        self._next_at = now + self.interval
        return True


class ControlLoop:
    def __init__(
        self,
        terminal: Terminal,
        machine: InputStateMachine,
        playback: PlaybackClient,
        renderer: Renderer,
        ticker: Ticker | None = None,
        poll_timeout: float = INPUT_POLL_SECONDS,
    ):
        self.terminal = terminal
        self.machine = machine
        self.playback = playback
        self.renderer = renderer
        self.ticker = ticker or Ticker(NOW_PLAYING_INTERVAL_SECONDS)
        self.poll_timeout = poll_timeout

    @property
    def running(self) -> bool:
        return self.machine.running

    def run(self) -> None:
        """Drive iterations until quit; the terminal is restored on any exit."""
        with self.terminal:
            logger.info("Control loop started")
            while self.run_once():
                pass
        logger.info("Control loop stopped")

    def run_once(self) -> bool:
        """One iteration: handle a key or a tick (never both), then repaint."""
        # Input wins: the poll never waits past the ticker deadline, and a
        # key that arrives in time defers a due tick to the next iteration.
        handled_key = self.machine.poll(min(self.poll_timeout, self.ticker.remaining()))
        if not handled_key and self.ticker.consume():
            self.refresh_now_playing()
        self.renderer.expire_message()

        if not self.running:
            return False

        self.renderer.render_controls(self.machine.selection)
        self.renderer.render_status(self.machine.status_text)
        return True

    def refresh_now_playing(self) -> None:
        now_playing = self.playback.now_playing()
        if self.renderer.render_now_playing(now_playing):
            logger.debug("Now playing: %s", self.renderer.cache.last_line)
