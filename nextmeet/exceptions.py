"""Error types shared by the auth, calendar and CLI layers."""


class NextMeetError(Exception):
    """Base class for every error the CLI reports without a traceback."""


class ConfigurationError(NextMeetError):
    """Required settings are missing or malformed."""


class CredentialIOError(NextMeetError):
    """The credential file is missing, unreadable or corrupt."""


class AuthorizationError(NextMeetError):
    """Interactive consent failed or no authorization code was received."""


class TokenExchangeError(NextMeetError):
    """The token endpoint rejected an authorization code or refresh token."""


class NetworkError(NextMeetError):
    """A provider endpoint could not be reached or answered with an error status."""


class ParseError(NextMeetError):
    """A provider response could not be decoded."""
