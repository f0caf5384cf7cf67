"""Pytest configuration and shared fixtures."""

import io
from unittest.mock import MagicMock

import pytest

from spotify_remote.auth_flow import AuthorizationFlow
from spotify_remote.credential_store import CredentialStore
from spotify_remote.display import DisplayCache, Renderer
from spotify_remote.env import ClientCredentials


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(payload, status_code: int = 200):
    """Mock requests.Response with a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client_credentials():
    return ClientCredentials(client_id="test-client-id", client_secret="test-client-secret")


@pytest.fixture
def mock_session():
    """Mock requests.Session used for token exchanges."""
    return MagicMock()


@pytest.fixture
def flow(client_credentials, mock_session):
    return AuthorizationFlow(client_credentials, session=mock_session, open_browser=MagicMock(return_value=True))


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "token.json")


@pytest.fixture
def screen():
    return io.StringIO()


@pytest.fixture
def terminal_size():
    """Mutable (columns, rows) pair read by the renderer."""
    return [80, 24]


@pytest.fixture
def renderer(screen, terminal_size):
    return Renderer(DisplayCache(), screen, size=lambda: tuple(terminal_size))
