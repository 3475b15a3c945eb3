"""Client for the Palworld dedicated server RCON console."""

from .client import Client
from .errors import (
    AuthenticationError,
    ConnectionFailedError,
    ParseError,
    RconError,
    UnexpectedResponseError,
)
from .models import Player, ServerInfo

__all__ = [
    "AuthenticationError",
    "Client",
    "ConnectionFailedError",
    "ParseError",
    "Player",
    "RconError",
    "ServerInfo",
    "UnexpectedResponseError",
]
