"""Environment-variable helpers and client credential loading."""

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError, MissingConfig

CLIENT_ID_VARS = ("SPOTIFY_CLIENT_ID", "CLIENT_ID")
CLIENT_SECRET_VARS = ("SPOTIFY_CLIENT_SECRET", "CLIENT_SECRET")


@dataclass(frozen=True)
class ClientCredentials:
    """Spotify app identifiers sent with every token exchange."""

    client_id: str
    client_secret: str

    def require(self) -> None:
        """Raise MissingConfig unless both identifiers are present."""
        missing = [name for name, value in (("client id", self.client_id), ("client secret", self.client_secret)) if not value]
        if missing:
            raise MissingConfig(f"Missing Spotify {' and '.join(missing)}")


def load_env_file(path: Path = Path(".env")) -> None:
    """Load simple KEY=VALUE pairs from a .env file into process env."""
    if not path.exists():
        return

    with path.open("r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            # Skip comments, blank lines, and malformed rows.
            if not line or line.startswith("#") or "=" not in line:
                continue

            # Split once so values containing '=' are preserved.
            key, value = line.split("=", 1)
            # Non-empty values already in the environment win over the file.
            key = key.strip()
            if not os.environ.get(key):
                os.environ[key] = value.strip().strip("'\"")


def get_required_env(*names: str) -> str:
    """Return the first non-empty variable among ``names`` or raise ConfigError."""
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    raise ConfigError(f"Missing required environment variable: {names[0]}")


def load_client_credentials() -> ClientCredentials:
    """Read the client id/secret pair, accepting the legacy variable names."""
    try:
        client_id = get_required_env(*CLIENT_ID_VARS)
        client_secret = get_required_env(*CLIENT_SECRET_VARS)
    except ConfigError as exc:
        raise MissingConfig(str(exc)) from exc
    return ClientCredentials(client_id=client_id, client_secret=client_secret)
