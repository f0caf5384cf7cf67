"""Modal keyboard handling: Normal-mode selection and vim-style ``:`` commands."""

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from .terminal import BACKSPACE, ENTER, ESCAPE, LEFT, RIGHT, KeyEvent

if TYPE_CHECKING:
    from .credentials import CredentialManager
    from .display import Renderer
    from .playback import PlaybackClient
    from .terminal import Terminal

logger = logging.getLogger(__name__)

COMMAND_MARKER = ":"
MODE_TOGGLE = KeyEvent("c", ctrl=True)

QUIT_COMMAND = ":q"
PRINT_TOKEN_COMMAND = ":print_token"
CLEAR_COMMAND = ":c"


class Mode(enum.Enum):
    NORMAL = "Normal Mode"
    COMMAND = "Command Mode"


class Selection(enum.Enum):
    PAUSE = "pause"
    SKIP_BACK = "skip_back"
    SKIP_FORWARD = "skip_forward"


# Two aliases per control.
NORMAL_BINDINGS = {
    "p": Selection.PAUSE,
    " ": Selection.PAUSE,
    "b": Selection.SKIP_BACK,
    LEFT: Selection.SKIP_BACK,
    "f": Selection.SKIP_FORWARD,
    RIGHT: Selection.SKIP_FORWARD,
}


@dataclass(frozen=True)
class NormalState:
    mode: ClassVar[Mode] = Mode.NORMAL


@dataclass(frozen=True)
class CommandState:
    """Command mode; ``pending`` holds the ``:`` line while one is being typed."""

    pending: str | None = None
    mode: ClassVar[Mode] = Mode.COMMAND


class InputStateMachine:
    def __init__(
        self,
        terminal: "Terminal",
        playback: "PlaybackClient",
        credentials: "CredentialManager",
        renderer: "Renderer",
    ):
        self.terminal = terminal
        self.playback = playback
        self.credentials = credentials
        self.renderer = renderer
        self.state: NormalState | CommandState = NormalState()
        self.selection = Selection.PAUSE
        self.running = True

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def status_text(self) -> str:
        """Bottom-line text: the command being typed, else the mode name."""
        if isinstance(self.state, CommandState) and self.state.pending is not None:
            return self.state.pending
        return self.mode.value

    def poll(self, timeout: float) -> bool:
        """Handle at most one key arriving within ``timeout``; report whether one did."""
        event = self.terminal.poll_key(timeout)
        if event is None:
            return False
        self.handle_key(event)
        return True

    def handle_key(self, event: KeyEvent) -> None:
        if event == MODE_TOGGLE:
            self.toggle_mode()
        elif isinstance(self.state, NormalState):
            self._handle_normal(event)
        else:
            self._handle_command(event, self.state)

    def toggle_mode(self) -> None:
        # Entering command mode always starts without a pending line.
        self.state = CommandState() if isinstance(self.state, NormalState) else NormalState()

    def _handle_normal(self, event: KeyEvent) -> None:
        if event.ctrl:
            return

        if event.key == ENTER:
            self.dispatch_selection()
            return

        selection = NORMAL_BINDINGS.get(event.key)
        if selection is not None:
            self.selection = selection

    def _handle_command(self, event: KeyEvent, state: CommandState) -> None:
        if state.pending is None:
            if event.key == COMMAND_MARKER and not event.ctrl:
                self.state = CommandState(pending=COMMAND_MARKER)
            return

        if event.key == ESCAPE:
            self.state = CommandState()
        elif event.key == ENTER:
            self.state = CommandState()
            self.dispatch_command(state.pending)
        elif event.key == BACKSPACE:
            # The marker stays; only typed characters are removed.
            if len(state.pending) > len(COMMAND_MARKER):
                self.state = CommandState(pending=state.pending[:-1])
        elif event.is_printable:
            self.state = CommandState(pending=state.pending + event.key)

    def dispatch_selection(self) -> None:
        """Run the playback call for the highlighted control."""
        if self.selection is Selection.PAUSE:
            self.playback.toggle_pause()
        elif self.selection is Selection.SKIP_BACK:
            self.playback.skip_back()
        else:
            self.playback.skip_forward()

    def dispatch_command(self, command: str) -> bool:
        """Execute an exact-match command; unknown input is ignored."""
        self.renderer.clear_message()
        if command == QUIT_COMMAND:
            self.state = NormalState()
            self.running = False
        elif command == PRINT_TOKEN_COMMAND:
            self.renderer.show_message(self.credentials.get_token())
        elif command == CLEAR_COMMAND:
            self.renderer.clear()
        else:
            logger.debug("Ignored unknown command %r", command)
            return False

        logger.info("Ran command %s", command)
        return True
