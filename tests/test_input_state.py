"""Unit tests for modal key handling and command dispatch."""

from unittest.mock import MagicMock, call

import pytest

from spotify_remote.input_state import (
    CommandState,
    InputStateMachine,
    Mode,
    NormalState,
    Selection,
)
from spotify_remote.terminal import BACKSPACE, ENTER, ESCAPE, LEFT, RIGHT, KeyEvent

CTRL_C = KeyEvent("c", ctrl=True)


@pytest.fixture
def machine(renderer):
    credentials = MagicMock()
    credentials.get_token.return_value = "bearer-token"
    return InputStateMachine(MagicMock(), MagicMock(), credentials, renderer)


def press(machine, *keys):
    for key in keys:
        machine.handle_key(key if isinstance(key, KeyEvent) else KeyEvent(key))


def type_command(machine, text):
    press(machine, CTRL_C, *text, ENTER)


def test_defaults(machine):
    assert machine.mode is Mode.NORMAL
    assert machine.selection is Selection.PAUSE
    assert machine.running is True
    assert machine.status_text == "Normal Mode"


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("p", Selection.PAUSE),
        (" ", Selection.PAUSE),
        ("b", Selection.SKIP_BACK),
        (LEFT, Selection.SKIP_BACK),
        ("f", Selection.SKIP_FORWARD),
        (RIGHT, Selection.SKIP_FORWARD),
    ],
)
def test_normal_mode_selection_keys(machine, key, expected):
    press(machine, "b" if expected is not Selection.SKIP_BACK else "f")

    press(machine, key)

    assert machine.selection is expected
    assert machine.playback.method_calls == []


def test_unbound_keys_are_ignored(machine):
    press(machine, "f", "x", "q", KeyEvent("a", ctrl=True), ESCAPE)

    assert machine.selection is Selection.SKIP_FORWARD
    assert machine.mode is Mode.NORMAL


@pytest.mark.parametrize(
    ("select_key", "operation"),
    [("p", "toggle_pause"), ("b", "skip_back"), ("f", "skip_forward")],
)
def test_enter_dispatches_exactly_one_operation(machine, select_key, operation):
    press(machine, select_key, ENTER)

    assert machine.playback.method_calls == [getattr(call, operation)()]


def test_toggle_twice_returns_to_original_mode(machine):
    press(machine, CTRL_C)
    assert machine.mode is Mode.COMMAND
    assert machine.status_text == "Command Mode"

    press(machine, CTRL_C)
    assert machine.mode is Mode.NORMAL


def test_toggle_works_while_typing_a_command(machine):
    press(machine, CTRL_C, ":", "q", CTRL_C)

    assert machine.state == NormalState()
    assert machine.running is True


def test_entering_command_mode_resets_pending(machine):
    press(machine, CTRL_C, ":", "x", CTRL_C, CTRL_C)

    assert machine.state == CommandState(pending=None)


def test_selection_keys_ignored_in_command_mode(machine):
    press(machine, CTRL_C, "f", RIGHT, "b", LEFT, ENTER)

    assert machine.selection is Selection.PAUSE
    assert machine.playback.method_calls == []


def test_colon_starts_buffer_and_keys_append(machine):
    press(machine, CTRL_C, ":", "p", "r")

    assert machine.state == CommandState(pending=":pr")
    assert machine.status_text == ":pr"


def test_keys_before_colon_are_ignored_in_command_mode(machine):
    press(machine, CTRL_C, "q", ENTER)

    assert machine.state == CommandState(pending=None)
    assert machine.running is True


def test_backspace_keeps_marker(machine):
    press(machine, CTRL_C, ":", "q", BACKSPACE)
    assert machine.state.pending == ":"

    press(machine, BACKSPACE)
    assert machine.state.pending == ":"


def test_escape_cancels_without_running(machine):
    press(machine, CTRL_C, ":", "q", ESCAPE)

    assert machine.state == CommandState(pending=None)
    assert machine.running is True


def test_quit_command_stops_running(machine):
    type_command(machine, ":q")

    assert machine.running is False
    assert machine.mode is Mode.NORMAL


def test_print_token_only_displays(machine, screen):
    press(machine, "f")

    type_command(machine, ":print_token")

    assert "bearer-token" in screen.getvalue()
    assert machine.running is True
    assert machine.selection is Selection.SKIP_FORWARD
    assert machine.state == CommandState(pending=None)


def test_clear_command_invalidates_display_cache(machine, renderer):
    renderer.cache.should_redraw("Song A - Artist A", 80)

    type_command(machine, ":c")

    assert renderer.cache.last_line is None
    assert machine.running is True


@pytest.mark.parametrize("command", [":quit", ":Q", ":q ", ":cc", ":print", ":"])
def test_unknown_commands_are_noops(machine, renderer, command):
    renderer.cache.should_redraw("Song A - Artist A", 80)

    assert machine.dispatch_command(command) is False
    assert machine.running is True
    assert renderer.cache.last_line == "Song A - Artist A"
    machine.credentials.get_token.assert_not_called()


def test_poll_handles_one_key(machine):
    machine.terminal.poll_key.return_value = KeyEvent("f")

    assert machine.poll(0.05) is True
    machine.terminal.poll_key.assert_called_once_with(0.05)
    assert machine.selection is Selection.SKIP_FORWARD


def test_poll_without_input_is_not_an_error(machine):
    machine.terminal.poll_key.return_value = None

    assert machine.poll(0.05) is False
    assert machine.selection is Selection.PAUSE


def test_next_command_erases_token_message(machine, screen):
    type_command(machine, ":print_token")
    shown = screen.getvalue()

    press(machine, *":nope", ENTER)

    assert screen.getvalue()[len(shown):] == "\033[22;1H\033[2K"
