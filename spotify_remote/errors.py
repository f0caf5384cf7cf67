"""Exception taxonomy shared by the auth flow, playback calls and the control loop."""


class RemoteError(Exception):
    """Base class for every error the remote raises on purpose."""


class ConfigError(RemoteError):
    """Required configuration (client id/secret) is missing or unusable."""


class AuthError(RemoteError):
    """Login or token refresh could not produce usable credentials."""


class MissingConfig(AuthError, ConfigError):
    """Client identifiers were absent when credentials were needed."""


class NetworkFailure(AuthError):
    """The token endpoint could not be reached."""


class MalformedResponse(AuthError):
    """The token endpoint answered without the fields we need."""


class ExchangeRejected(AuthError):
    """The token endpoint answered with an OAuth error."""


class AuthorizationTimeout(AuthError):
    """The redirect listener gave up before receiving a code."""


class PlaybackError(RemoteError):
    """A playback API call failed."""


class TerminalError(RemoteError):
    """The terminal cannot be put into raw mode."""
