"""CLI entrypoint and high-level application orchestration."""

import argparse
import logging
import sys
from pathlib import Path

from .auth_flow import AuthorizationFlow, ListenerPolicy
from .config import (
    DEBUG_LOG_PATH,
    DEFAULT_LOGIN_MAX_CONNECTIONS,
    DEFAULT_LOGIN_TIMEOUT_SECONDS,
    NOW_PLAYING_INTERVAL_SECONDS,
    TOKEN_PATH,
)
from .control_loop import ControlLoop, Ticker
from .credential_store import CredentialStore
from .credentials import CredentialManager
from .display import DisplayCache, Renderer
from .env import load_client_credentials, load_env_file
from .errors import RemoteError
from .input_state import InputStateMachine
from .logging_config import setup_logging
from .playback import PlaybackClient
from .terminal import Terminal

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI options controlling auth storage, logging and refresh cadence."""
    parser = argparse.ArgumentParser(description="Terminal remote control for Spotify playback")
    parser.add_argument(
        "--token-path",
        type=Path,
        default=TOKEN_PATH,
        help=f"File holding the refresh token (default: {TOKEN_PATH}).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=DEBUG_LOG_PATH,
        help=f"Debug log file (default: {DEBUG_LOG_PATH}).",
    )
    parser.add_argument(
        "--tick-seconds",
        type=float,
        default=NOW_PLAYING_INTERVAL_SECONDS,
        help="Seconds between now-playing refreshes (default: 5).",
    )
    parser.add_argument(
        "--login",
        action="store_true",
        help="Ignore the stored refresh token and log in through the browser again.",
    )
    parser.add_argument(
        "--login-timeout",
        type=float,
        default=DEFAULT_LOGIN_TIMEOUT_SECONDS,
        help="Seconds to wait for the login redirect. 0 waits forever.",
    )
    parser.add_argument(
        "--login-max-connections",
        type=int,
        default=DEFAULT_LOGIN_MAX_CONNECTIONS,
        help="Redirect connections without a code to tolerate. 0 means unlimited.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the full app lifecycle: config, authentication, control loop."""
    args = parse_args(argv)
    load_env_file()
    setup_logging(args.log_file)

    try:
        flow = AuthorizationFlow(
            load_client_credentials(),
            policy=ListenerPolicy(
                timeout_seconds=max(0.0, args.login_timeout),
                max_connections=max(0, args.login_max_connections),
            ),
        )
        credentials = CredentialManager.bootstrap(flow, CredentialStore(args.token_path), force_login=args.login)
    except RemoteError as exc:
        logger.exception("Authentication failed")
        print(f"Failed to authenticate: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    playback = PlaybackClient(credentials)
    terminal = Terminal()
    renderer = Renderer(DisplayCache(), terminal.stdout)
    machine = InputStateMachine(terminal, playback, credentials, renderer)
    loop = ControlLoop(terminal, machine, playback, renderer, ticker=Ticker(max(0.5, args.tick_seconds)))

    try:
        loop.run()
    except RemoteError as exc:
        logger.exception("Control loop aborted")
        print(f"Stopped: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    finally:
        # Ensure HTTP sessions are closed on normal exit or error.
        playback.close()
