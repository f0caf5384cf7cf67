"""Logging setup: everything goes to a debug file so the terminal UI stays clean."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import DEBUG_LOG_PATH


def configure_spotipy_logging() -> None:
    """Reduce Spotipy logger noise; its warnings would land on the UI otherwise."""
    for logger_name in ("spotipy", "spotipy.client", "spotipy.oauth2"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.CRITICAL)
        logger.propagate = False


def setup_logging(log_path: Path = DEBUG_LOG_PATH, level: int = logging.INFO) -> logging.Logger:
    """Configure the root logger with a rotating file handler."""
    handler = RotatingFileHandler(log_path, maxBytes=1024 * 1024, backupCount=2, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] [%(name)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )

    root = logging.getLogger()
    root.setLevel(level)
    # No StreamHandler: stderr output would tear the raw-mode screen.
    root.handlers = [handler]

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    configure_spotipy_logging()
    return logging.getLogger("spotify_remote")
