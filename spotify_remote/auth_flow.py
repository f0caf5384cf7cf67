"""Authorization Code flow: browser login, redirect listener, and token exchange."""

import enum
import logging
import socket
import time
import urllib.parse
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import requests

from .config import (
    DEFAULT_LOGIN_MAX_CONNECTIONS,
    DEFAULT_LOGIN_TIMEOUT_SECONDS,
    REDIRECT_HOST,
    REDIRECT_PORT,
    REDIRECT_URI,
    SCOPE,
    SPOTIFY_AUTHORIZE_URL,
    SPOTIFY_TOKEN_URL,
)
from .env import ClientCredentials
from .errors import (
    AuthorizationTimeout,
    ExchangeRejected,
    MalformedResponse,
    NetworkFailure,
)

logger = logging.getLogger(__name__)

SUCCESS_PAGE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Type: text/html; charset=utf-8\r\n"
    b"Connection: close\r\n"
    b"\r\n"
    b"<h1>Spotify Login Successful! You can close this tab.</h1>"
)
REQUEST_READ_SIZE = 1024


class GrantKind(enum.Enum):
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"


@dataclass(frozen=True)
class TokenGrant:
    """Fields consumed from one token endpoint response."""

    access_token: str
    expires_in: int
    refresh_token: str | None = None


@dataclass(frozen=True)
class ListenerPolicy:
    """Bounds for the redirect listener; 0 (or None) leaves a bound off."""

    timeout_seconds: float | None = DEFAULT_LOGIN_TIMEOUT_SECONDS
    max_connections: int | None = DEFAULT_LOGIN_MAX_CONNECTIONS


def extract_code(request_text: str) -> str | None:
    """Pull the one-time code out of an HTTP request line.

    Only the first line is inspected; the code runs from ``code=`` up to the
    next whitespace.
    """
    request_line = request_text.split("\r\n", 1)[0].split("\n", 1)[0]
    start = request_line.find("code=")
    if start == -1:
        return None

    rest = request_line[start + len("code="):]
    end = next((index for index, char in enumerate(rest) if char.isspace()), len(rest))
    return rest[:end] or None


def wait_for_code(server: socket.socket, policy: ListenerPolicy, clock: Callable[[], float] = time.monotonic) -> str:
    """Accept redirect connections in sequence until one carries a code."""
    deadline = clock() + policy.timeout_seconds if policy.timeout_seconds else None
    connections = 0

    while True:
        if deadline is not None:
            remaining = deadline - clock()
            if remaining <= 0:
                raise AuthorizationTimeout(f"No authorization redirect within {policy.timeout_seconds}s")
            server.settimeout(remaining)
        else:
            server.settimeout(None)

        try:
            conn, address = server.accept()
        except TimeoutError as exc:
            raise AuthorizationTimeout(f"No authorization redirect within {policy.timeout_seconds}s") from exc

        connections += 1
        with conn:
            # A silent client may not hold the listener past its deadline.
            conn.settimeout(server.gettimeout())
            try:
                request_text = conn.recv(REQUEST_READ_SIZE).decode("utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Redirect connection from %s failed before a request: %s", address[0], exc)
                request_text = ""
            code = extract_code(request_text)
            if code:
                try:
                    conn.sendall(SUCCESS_PAGE)
                except OSError as exc:
                    # The code already arrived; only the browser's page is lost.
                    logger.warning("Could not send the login page to %s: %s", address[0], exc)
                logger.info("Received authorization code from %s", address[0])
                return code

        logger.warning("Ignored redirect connection without a code (%d so far)", connections)
        if policy.max_connections and connections >= policy.max_connections:
            raise AuthorizationTimeout(f"Gave up after {connections} connections without an authorization code")


class AuthorizationFlow:
    """One-time interactive login plus the token endpoint exchange."""

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        policy: ListenerPolicy | None = None,
        session: requests.Session | None = None,
        open_browser: Callable[[str], bool] = webbrowser.open,
        host: str = REDIRECT_HOST,
        port: int = REDIRECT_PORT,
    ):
        self.credentials = credentials
        self.policy = policy or ListenerPolicy()
        self._session = session or requests.Session()
        self._open_browser = open_browser
        self.host = host
        self.port = port

    def authorize_url(self) -> str:
        params = {
            "client_id": self.credentials.client_id,
            "response_type": "code",
            "redirect_uri": REDIRECT_URI,
            "scope": SCOPE,
        }
        return f"{SPOTIFY_AUTHORIZE_URL}?{urllib.parse.urlencode(params)}"

    def interactive_login(self) -> str:
        """Send the user to Spotify and block until the redirect delivers a code."""
        url = self.authorize_url()
        try:
            opened = self._open_browser(url)
        except webbrowser.Error as exc:
            logger.warning("Could not open browser: %s", exc)
            opened = False

        if opened:
            print("Opened Spotify login page in browser")
        else:
            logger.warning("Browser did not open for the login page")
            print("Failed to open Spotify login page in browser")
        print(f"If nothing happened, visit: {url}")

        with socket.create_server((self.host, self.port)) as server:
            return wait_for_code(server, self.policy)

    def exchange(self, value: str, grant_kind: GrantKind) -> TokenGrant:
        """POST one grant to the token endpoint and validate the answer."""
        form = {
            "grant_type": grant_kind.value,
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
        }
        if grant_kind is GrantKind.AUTHORIZATION_CODE:
            form["code"] = value
            form["redirect_uri"] = REDIRECT_URI
        else:
            form["refresh_token"] = value

        try:
            response = self._session.post(
                SPOTIFY_TOKEN_URL,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except requests.RequestException as exc:
            raise NetworkFailure(f"Spotify token request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Spotify token response was not JSON (HTTP {response.status_code})") from exc

        if not isinstance(payload, dict):
            raise MalformedResponse("Spotify token response was not an object")

        if response.status_code >= 400:
            reason = payload.get("error_description") or payload.get("error") or "unknown error"
            raise ExchangeRejected(f"Spotify rejected the {grant_kind.value} grant (HTTP {response.status_code}): {reason}")

        grant = parse_token_response(payload)
        logger.info(
            "Exchanged %s grant; token valid for %ss%s",
            grant_kind.value,
            grant.expires_in,
            ", new refresh token issued" if grant.refresh_token else "",
        )
        return grant


def parse_token_response(payload: dict[str, Any]) -> TokenGrant:
    access_token = payload.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise MalformedResponse("Spotify token response is missing access_token")

    expires_in = payload.get("expires_in")
    # bool is an int subclass; reject it explicitly.
    if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in <= 0:
        raise MalformedResponse("Spotify token response is missing a positive expires_in")

    refresh_token = payload.get("refresh_token")
    if not isinstance(refresh_token, str) or not refresh_token.strip():
        refresh_token = None

    return TokenGrant(access_token=access_token, expires_in=expires_in, refresh_token=refresh_token)
