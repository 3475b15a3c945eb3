"""Exceptions raised by the Palworld RCON client.

Transport failures that are not listed here (``OSError`` and friends,
``EOFError``, ``rcon.exceptions.SessionTimeout``) are propagated unchanged.
"""


class RconError(Exception):
    """Base class for errors raised by this library."""


class ConnectionFailedError(RconError):
    """Raised when a connection to the RCON server cannot be established."""


class AuthenticationError(ConnectionFailedError):
    """Raised when the RCON server rejects the password."""


class UnexpectedResponseError(RconError):
    """Raised when the server answers a command with something other than
    the expected success message."""

    def __init__(self, message: str, response: str) -> None:
        super().__init__(message)
        self.response = response


class ParseError(RconError):
    """Raised when a response has the right shape but a field cannot be decoded."""

    def __init__(self, message: str, fragment: str) -> None:
        super().__init__(message)
        self.fragment = fragment
