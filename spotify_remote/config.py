"""Shared configuration constants used across the application."""

from pathlib import Path

# Spotify OAuth scopes needed for reading and controlling playback.
SCOPE = "user-read-currently-playing user-read-playback-state user-modify-playback-state"

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

# The redirect URI must match the one registered for the Spotify app exactly.
REDIRECT_HOST = "127.0.0.1"
REDIRECT_PORT = 8888
REDIRECT_URI = f"http://localhost:{REDIRECT_PORT}/"

# Local file paths for the persisted refresh token and the debug log.
TOKEN_PATH = Path("token.json")
DEBUG_LOG_PATH = Path("debug.log")

# Redirect listener policy; 0 disables the corresponding bound.
DEFAULT_LOGIN_TIMEOUT_SECONDS = 300
DEFAULT_LOGIN_MAX_CONNECTIONS = 25

# Runtime tuning constants.
NOW_PLAYING_INTERVAL_SECONDS = 5.0
INPUT_POLL_SECONDS = 0.05
MESSAGE_SECONDS = 5.0
