"""Client for the Palworld dedicated server RCON console.

Available commands are documented at
https://tech.palworldgame.com/settings-and-operation/commands#command-list.
Not all commands listed there are usable over RCON.
"""

from __future__ import annotations

import errno
import logging

from .models import Player, ServerInfo
from .protocol import commands, parser
from .transport.rcon_connection import Connection, dial

logger = logging.getLogger(__name__)


def is_connection_severed(error: BaseException) -> bool:
    """Whether ``error`` means the socket is gone (stream end or broken pipe)."""
    if isinstance(error, (EOFError, BrokenPipeError)):
        return True
    return isinstance(error, OSError) and error.errno == errno.EPIPE


class Client:
    """A client for a Palworld RCON server.

    Creating a client does not touch the network, so the password is not
    checked until the first command. The connection is opened on demand and
    reopened once if the server drops it between commands.

    Not safe for concurrent use from several threads.

    Usage::

        with Client("127.0.0.1:25575", "secret") as client:
            client.broadcast("Restarting soon")
            for player in client.show_players():
                print(player.name)
    """

    def __init__(self, address: str, password: str) -> None:
        self._address = address
        self._password = password
        self._connection: Connection | None = None

    @property
    def address(self) -> str:
        return self._address

    @property
    def connected(self) -> bool:
        return self._connection is not None

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Client(address={self._address!r}, connected={self.connected})"

    # ─── CONNECTION MANAGEMENT ─────────────────────────────────────────

    def connect(self) -> None:
        """(Re)open the connection, discarding any connection already held.

        Raises:
            ConnectionFailedError: If the server cannot be reached or
                rejects the password. No connection is held afterwards.
        """
        if self._connection is not None:
            old, self._connection = self._connection, None
            try:
                old.close()
            except Exception as e:
                logger.debug("Ignoring error closing stale connection: %s", e)

        self._connection = dial(self._address, self._password)

    def close(self) -> None:
        """Close the connection. Any later command reopens it.

        Does nothing if no connection is held. The connection is released
        even if closing it raises.
        """
        if self._connection is None:
            return
        conn, self._connection = self._connection, None
        conn.close()

    def execute(self, command: str, allow_retry: bool = True) -> str:
        """Run a raw command and return the trimmed response.

        If the server closed the connection (end of stream or broken pipe)
        the client reconnects and sends the command one more time. Any other
        error, or an error on the second attempt, is raised unchanged.

        Args:
            command: Raw command line, e.g. ``"Info"``.
            allow_retry: Set to False to fail on the first severed connection.
        """
        if self._connection is None:
            self.connect()

        attempts = 2 if allow_retry else 1
        for attempt in range(attempts):
            try:
                response = self._connection.execute(command)
            except Exception as e:
                if attempt + 1 >= attempts or not is_connection_severed(e):
                    raise
                logger.warning(
                    "Connection to %s lost (%s), reconnecting", self._address, e
                )
                self.connect()
                continue
            return response.strip()

    # ─── COMMANDS ──────────────────────────────────────────────────────

    def ban_player(self, steam_id: int) -> None:
        """Ban the player with the given Steam ID. The player must be online."""
        response = self.execute(commands.build_ban_player(steam_id))
        parser.parse_ban(response)

    def broadcast(self, message: str) -> None:
        """Display ``message`` to all online players."""
        response = self.execute(commands.build_broadcast(message))
        parser.parse_broadcast(response)

    def do_exit(self) -> None:
        """Make the server exit immediately."""
        response = self.execute(commands.build_do_exit())
        parser.parse_do_exit(response)

    def info(self) -> ServerInfo:
        """Return the server name and version."""
        response = self.execute(commands.build_info())
        return parser.parse_info(response)

    def kick_player(self, steam_id: int) -> None:
        """Kick the player with the given Steam ID."""
        response = self.execute(commands.build_kick_player(steam_id))
        parser.parse_kick(response)

    def save(self) -> None:
        """Save the world to disk."""
        response = self.execute(commands.build_save())
        parser.parse_save(response)

    def show_players(self) -> list[Player]:
        """Return the players currently online."""
        response = self.execute(commands.build_show_players())
        return parser.parse_show_players(response)

    def shutdown(self, seconds: int, message: str | None = None) -> None:
        """Shut the server down after ``seconds``.

        Args:
            seconds: Delay before shutting down.
            message: Optional notice displayed to all online players.
        """
        response = self.execute(commands.build_shutdown(seconds, message))
        parser.parse_shutdown(response)
