"""Durable storage for the single renewable secret (Spotify refresh token)."""

import logging
from pathlib import Path

from .config import TOKEN_PATH

logger = logging.getLogger(__name__)


class CredentialStore:
    """Reads and writes one trimmed refresh token line.

    Read/write failures are not swallowed: an unreadable token file is an
    ``OSError`` for the caller, the same as a terminal failure.
    """

    def __init__(self, path: Path = TOKEN_PATH):
        self.path = Path(path)

    def load(self) -> str | None:
        """Return the stored secret, or None when the file is absent or blank."""
        if not self.path.exists():
            return None

        secret = self.path.read_text(encoding="utf-8").strip()
        return secret or None

    def save(self, secret: str) -> None:
        secret = secret.strip()
        if not secret:
            raise ValueError("Refusing to persist an empty refresh token")

        self.path.write_text(secret, encoding="utf-8")
        logger.info("Stored refresh token in %s", self.path)
