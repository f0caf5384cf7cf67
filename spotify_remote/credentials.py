"""Access-token lifecycle: bootstrap once, refresh transparently when expired."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from .auth_flow import AuthorizationFlow, GrantKind, TokenGrant
from .credential_store import CredentialStore
from .errors import MalformedResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialSnapshot:
    access_token: str
    refresh_token: str
    expires_at: float


class CredentialManager:
    """Owns the current bearer token, the refresh token and the expiry.

    ``get_token`` is not re-entrant: two callers racing an expired token will
    both refresh. The control loop is the only caller and runs on one thread,
    so this is accepted rather than guarded.
    """

    def __init__(
        self,
        flow: AuthorizationFlow,
        store: CredentialStore,
        snapshot: CredentialSnapshot,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._flow = flow
        self._store = store
        self._snapshot = snapshot
        self._clock = clock

    @property
    def snapshot(self) -> CredentialSnapshot:
        return self._snapshot

    @classmethod
    def bootstrap(
        cls,
        flow: AuthorizationFlow,
        store: CredentialStore,
        *,
        force_login: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> "CredentialManager":
        """Build a manager from the stored refresh token, or log in interactively."""
        flow.credentials.require()

        saved_secret = None if force_login else store.load()
        if saved_secret:
            logger.info("Refreshing session from stored refresh token")
            grant = flow.exchange(saved_secret, GrantKind.REFRESH_TOKEN)
            if grant.refresh_token and grant.refresh_token != saved_secret:
                store.save(grant.refresh_token)
            return cls(flow, store, _snapshot_from_grant(grant, saved_secret, clock()), clock)

        logger.info("No stored refresh token; starting interactive login")
        code = flow.interactive_login()
        grant = flow.exchange(code, GrantKind.AUTHORIZATION_CODE)
        if not grant.refresh_token:
            raise MalformedResponse("Spotify token response is missing refresh_token")

        store.save(grant.refresh_token)
        return cls(flow, store, _snapshot_from_grant(grant, grant.refresh_token, clock()), clock)

    def get_token(self) -> str:
        """Return a bearer token, refreshing first when it has expired."""
        if self._clock() >= self._snapshot.expires_at:
            self.refresh()
        return self._snapshot.access_token

    def refresh(self) -> None:
        previous = self._snapshot
        grant = self._flow.exchange(previous.refresh_token, GrantKind.REFRESH_TOKEN)
        self._snapshot = _snapshot_from_grant(grant, previous.refresh_token, self._clock())

        if grant.refresh_token and grant.refresh_token != previous.refresh_token:
            self._store.save(grant.refresh_token)
        logger.info("Access token refreshed")


def _snapshot_from_grant(grant: TokenGrant, fallback_refresh_token: str, now: float) -> CredentialSnapshot:
    # Spotify may omit refresh_token on refresh; keep the existing one.
    return CredentialSnapshot(
        access_token=grant.access_token,
        refresh_token=grant.refresh_token or fallback_refresh_token,
        expires_at=now + grant.expires_in,
    )
