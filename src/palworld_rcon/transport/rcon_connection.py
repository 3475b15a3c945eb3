"""TCP connection to a Palworld RCON server.

Packet framing and the login handshake are handled by the ``rcon`` package
(``rcon.source.Client``); this module only adapts it to the small
dial/execute/close surface the client needs.
"""

from __future__ import annotations

import logging
from typing import Protocol

from rcon.exceptions import EmptyResponse, SessionTimeout, WrongPassword
from rcon.source import Client as SourceClient

from ..errors import AuthenticationError, ConnectionFailedError

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """A live, authenticated RCON session."""

    def execute(self, command: str) -> str:
        ...

    def close(self) -> None:
        ...


def split_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[ipv6]:port``) into its parts.

    Raises:
        ConnectionFailedError: If the port is missing or not a valid number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ConnectionFailedError(f"missing port in address {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not port.isdigit() or not 0 < int(port) <= 0xFFFF:
        raise ConnectionFailedError(f"invalid port in address {address!r}")
    return host, int(port)


class RconConnection:
    """An authenticated session on top of ``rcon.source.Client``.

    The caller owns the connection and must close it; ``Client`` does this
    when it replaces or closes its connection.

    Usage::

        conn = dial("127.0.0.1:25575", "secret")
        response = conn.execute("Info")
        conn.close()
    """

    def __init__(self, client: SourceClient, address: str) -> None:
        self._client = client
        self._address = address

    @property
    def address(self) -> str:
        return self._address

    def execute(self, command: str) -> str:
        """Send one command and return the full reply.

        An empty read (the server closed the socket) is raised as
        ``EOFError``. Other transport errors (``BrokenPipeError`` and other
        ``OSError`` subclasses, ``rcon.exceptions.SessionTimeout``) are
        raised unchanged.
        """
        logger.debug("-> %s: %s", self._address, command)
        try:
            response = self._client.run(command)
        except EmptyResponse as e:
            raise EOFError(f"connection to {self._address} closed by server") from e
        logger.debug("<- %s: %r", self._address, response)
        return response

    def close(self) -> None:
        """Close the underlying socket."""
        self._client.close()
        logger.debug("Closed connection to %s", self._address)


def dial(address: str, password: str) -> RconConnection:
    """Connect to ``address`` and log in with ``password``.

    Returns:
        An authenticated RconConnection.

    Raises:
        AuthenticationError: If the server rejects the password.
        ConnectionFailedError: If the server cannot be reached.
    """
    host, port = split_address(address)
    client = SourceClient(host, port, passwd=password)
    try:
        client.connect(login=True)
    except WrongPassword as e:
        client.close()
        raise AuthenticationError(
            f"RCON authentication failed for {address}: wrong password"
        ) from e
    except (OSError, EmptyResponse, SessionTimeout) as e:
        client.close()
        raise ConnectionFailedError(
            f"Could not connect to RCON server at {address}: {e!r}"
        ) from e
    except BaseException:
        client.close()
        raise

    logger.info("Connected to RCON server at %s", address)
    return RconConnection(client, address)
