"""Data models for decoded server responses."""

from .player import Player
from .server import ServerInfo
