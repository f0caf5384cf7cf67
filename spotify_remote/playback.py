"""Playback helpers: pause/resume, skip, and the currently playing track."""

import logging
from dataclasses import dataclass
from typing import Any

import requests
import spotipy
from spotipy.exceptions import SpotifyException

from .credentials import CredentialManager
from .errors import PlaybackError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NowPlaying:
    song: str
    album: str
    artist: str


def normalize_now_playing(payload: dict[str, Any] | None) -> NowPlaying | None:
    """Convert a currently-playing response into NowPlaying, or None when idle."""
    if not isinstance(payload, dict):
        return None

    item = payload.get("item")
    if not isinstance(item, dict):
        return None

    album = item.get("album")
    album_name = album.get("name") if isinstance(album, dict) else None

    artist_name = None
    raw_artists = item.get("artists")
    if isinstance(raw_artists, list) and raw_artists and isinstance(raw_artists[0], dict):
        artist_name = raw_artists[0].get("name")

    return NowPlaying(
        song=str(item.get("name") or "Unknown Song"),
        album=str(album_name or "Unknown Album"),
        artist=str(artist_name or "Unknown Artist"),
    )


class CredentialAuthManager:
    """Spotipy auth manager that asks the CredentialManager for every request's token."""

    def __init__(self, credentials: CredentialManager):
        self._credentials = credentials

    def get_access_token(self, as_dict: bool = False) -> str:
        # Spotipy passes as_dict=False; only the bare token is ever handed out.
        return self._credentials.get_token()


class PlaybackClient:
    """Thin Spotify Web API wrapper authorised by the CredentialManager's token."""

    def __init__(
        self,
        credentials: CredentialManager,
        requests_timeout: int = 10,
        session: requests.Session | None = None,
    ):
        self._credentials = credentials
        self._session = session or requests.Session()
        self._requests_timeout = requests_timeout
        self._client: spotipy.Spotify | None = None

    def _spotify(self) -> spotipy.Spotify:
        if self._client is None:
            self._client = spotipy.Spotify(
                auth_manager=CredentialAuthManager(self._credentials),
                requests_session=self._session,
                requests_timeout=self._requests_timeout,
                retries=0,
                status_retries=0,
            )
        return self._client

    def toggle_pause(self) -> None:
        """Pause when something is playing, otherwise resume."""
        try:
            sp = self._spotify()
            state = sp.current_playback()
            if isinstance(state, dict) and state.get("is_playing"):
                sp.pause_playback()
                logger.info("Paused")
            else:
                sp.start_playback()
                logger.info("Resumed")
        except (SpotifyException, requests.RequestException) as exc:
            raise PlaybackError(f"Spotify pause/resume failed: {exc}") from exc

    def skip_back(self) -> None:
        try:
            self._spotify().previous_track()
        except (SpotifyException, requests.RequestException) as exc:
            raise PlaybackError(f"Spotify previous track failed: {exc}") from exc
        logger.info("Skipped back")

    def skip_forward(self) -> None:
        try:
            self._spotify().next_track()
        except (SpotifyException, requests.RequestException) as exc:
            raise PlaybackError(f"Spotify next track failed: {exc}") from exc
        logger.info("Skipped forward")

    def now_playing(self) -> NowPlaying | None:
        try:
            payload = self._spotify().current_user_playing_track()
        except (SpotifyException, requests.RequestException) as exc:
            raise PlaybackError(f"Spotify currently-playing fetch failed: {exc}") from exc
        return normalize_now_playing(payload)

    def close(self) -> None:
        """Drop the Spotipy client and close its HTTP session."""
        self._client = None
        self._session.close()
