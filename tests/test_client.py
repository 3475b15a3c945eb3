"""Tests for connection management and the retry policy of Client."""

from __future__ import annotations

import errno
from unittest.mock import MagicMock, patch

import pytest
from rcon.exceptions import EmptyResponse

from palworld_rcon import Client, ServerInfo
from palworld_rcon.client import is_connection_severed
from palworld_rcon.errors import (
    AuthenticationError,
    ConnectionFailedError,
    ParseError,
    UnexpectedResponseError,
)

ADDRESS = "127.0.0.1:25575"


def _conn(*results) -> MagicMock:
    """Build a fake connection whose execute() yields ``results`` in order.

    Exceptions in ``results`` are raised instead of returned.
    """
    conn = MagicMock()
    conn.execute.side_effect = list(results)
    return conn


def _client_with(*connections) -> tuple[Client, MagicMock]:
    """Create a Client and a dial mock that hands out ``connections``."""
    dial = MagicMock(side_effect=list(connections))
    patcher = patch("palworld_rcon.client.dial", dial)
    patcher.start()
    return Client(ADDRESS, "secret"), dial


@pytest.fixture(autouse=True)
def _stop_patches():
    yield
    patch.stopall()


# ─── CONNECTION MANAGEMENT ────────────────────────────────────────────


def test_constructor_does_not_dial():
    client, dial = _client_with()
    assert not client.connected
    dial.assert_not_called()


def test_first_command_dials_once():
    conn = _conn("Complete Save", "Complete Save")
    client, dial = _client_with(conn)

    client.save()
    client.save()

    dial.assert_called_once_with(ADDRESS, "secret")
    assert client.connected
    assert conn.execute.call_count == 2


def test_dial_failure_propagates_without_retry():
    client, dial = _client_with(AuthenticationError("wrong password"))

    with pytest.raises(AuthenticationError):
        client.save()

    assert dial.call_count == 1
    assert not client.connected


def test_close_without_connection_is_noop():
    client, dial = _client_with()
    client.close()
    client.close()
    dial.assert_not_called()


def test_close_releases_connection():
    conn = _conn("Complete Save")
    client, _ = _client_with(conn)
    client.save()

    client.close()

    conn.close.assert_called_once()
    assert not client.connected


def test_close_error_still_releases_connection():
    conn = _conn("Complete Save")
    conn.close.side_effect = OSError("already closed")
    client, _ = _client_with(conn)
    client.save()

    with pytest.raises(OSError):
        client.close()
    assert not client.connected


def test_command_after_close_redials():
    first = _conn("Complete Save")
    second = _conn("Complete Save")
    client, dial = _client_with(first, second)

    client.save()
    client.close()
    client.save()

    assert dial.call_count == 2
    second.execute.assert_called_once_with("Save")


def test_connect_replaces_existing_connection():
    first = _conn()
    first.close.side_effect = OSError("broken")
    second = _conn()
    client, dial = _client_with(first, second)

    client.connect()
    client.connect()

    first.close.assert_called_once()
    assert dial.call_count == 2
    assert client.connected


def test_failed_reconnect_leaves_client_disconnected():
    first = _conn()
    client, _ = _client_with(first, ConnectionFailedError("unreachable"))

    client.connect()
    with pytest.raises(ConnectionFailedError):
        client.connect()

    first.close.assert_called_once()
    assert not client.connected


def test_context_manager_closes():
    conn = _conn("Complete Save")
    client, _ = _client_with(conn)

    with client:
        client.save()

    conn.close.assert_called_once()
    assert not client.connected


# ─── RETRY POLICY ─────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "error",
    [EOFError(), BrokenPipeError(), OSError(errno.EPIPE, "Broken pipe")],
)
def test_severed_connection_retries_once(error):
    first = _conn(error)
    second = _conn("Complete Save")
    client, dial = _client_with(first, second)

    client.save()

    assert dial.call_count == 2
    first.close.assert_called_once()
    first.execute.assert_called_once_with("Save")
    second.execute.assert_called_once_with("Save")


def test_second_severed_connection_is_raised():
    first = _conn(EOFError())
    second = _conn(BrokenPipeError())
    client, dial = _client_with(first, second)

    with pytest.raises(BrokenPipeError):
        client.save()

    assert dial.call_count == 2
    assert second.execute.call_count == 1


def test_other_errors_do_not_reconnect():
    conn = _conn(ConnectionResetError("reset"))
    client, dial = _client_with(conn)

    with pytest.raises(ConnectionResetError):
        client.save()

    assert dial.call_count == 1
    conn.close.assert_not_called()


def test_reconnect_failure_propagates():
    first = _conn(EOFError())
    client, dial = _client_with(first, ConnectionFailedError("unreachable"))

    with pytest.raises(ConnectionFailedError):
        client.save()

    assert dial.call_count == 2
    assert not client.connected


def test_retry_disabled():
    conn = _conn(EOFError())
    client, dial = _client_with(conn)

    with pytest.raises(EOFError):
        client.execute("Save", allow_retry=False)

    assert dial.call_count == 1


def test_execute_trims_response():
    client, _ = _client_with(_conn("  \nShutdown...\r\n"))
    assert client.execute("DoExit") == "Shutdown..."


def test_is_connection_severed():
    assert is_connection_severed(EOFError())
    assert is_connection_severed(BrokenPipeError())
    assert is_connection_severed(OSError(errno.EPIPE, "Broken pipe"))
    assert not is_connection_severed(ConnectionResetError())
    assert not is_connection_severed(TimeoutError())
    assert not is_connection_severed(ValueError())


# ─── COMMANDS ─────────────────────────────────────────────────────────


def test_info():
    client, _ = _client_with(_conn("Welcome to Pal Server[v1.5.2] MyServer\n"))
    assert client.info() == ServerInfo(name="MyServer", version="1.5.2")


def test_show_players():
    client, _ = _client_with(
        _conn("name,playerUID,steamID\nAlice,1001,76500000000000001\n")
    )
    players = client.show_players()
    assert len(players) == 1
    assert players[0].name == "Alice"
    assert players[0].player_uid == 1001
    assert players[0].steam_id == 76500000000000001


def test_show_players_bad_row():
    client, _ = _client_with(_conn("name,playerUID,steamID\nAlice,1001"))
    with pytest.raises(ParseError):
        client.show_players()


def test_ban_player():
    conn = _conn("Baned: 123", "Not found")
    client, _ = _client_with(conn)

    client.ban_player(123)
    with pytest.raises(UnexpectedResponseError, match="Not found"):
        client.ban_player(123)

    conn.execute.assert_called_with("BanPlayer 123")


def test_kick_and_broadcast():
    conn = _conn("Kicked: 7", "Broadcasted: hi")
    client, _ = _client_with(conn)

    client.kick_player(7)
    client.broadcast("hi")

    assert [c.args[0] for c in conn.execute.call_args_list] == [
        "KickPlayer 7",
        "Broadcast hi",
    ]


def test_do_exit():
    client, _ = _client_with(_conn("Shutdown...", "Bye"))
    client.do_exit()
    with pytest.raises(UnexpectedResponseError):
        client.do_exit()


def test_shutdown_with_and_without_message():
    conn = _conn(
        "The server will shut down in 30 seconds.",
        "The server will shut down in 10 seconds.",
    )
    client, _ = _client_with(conn)

    client.shutdown(30)
    client.shutdown(10, "Restarting")

    assert [c.args[0] for c in conn.execute.call_args_list] == [
        "Shutdown 30",
        "Shutdown 10 Restarting",
    ]


def test_shutdown_propagates_transport_errors():
    """A failed Shutdown call is reported instead of being treated as success."""
    client, _ = _client_with(_conn(ConnectionResetError("reset")))
    with pytest.raises(ConnectionResetError):
        client.shutdown(30)


def test_invalid_arguments_do_not_dial():
    client, dial = _client_with()
    with pytest.raises(ValueError):
        client.broadcast("")
    with pytest.raises(ValueError):
        client.shutdown(-1)
    dial.assert_not_called()


def test_server_hangup_reconnects_through_transport():
    """A dropped socket on the real adapter triggers one reconnect and retry."""
    stale = MagicMock()
    stale.run.side_effect = ["Complete Save", EmptyResponse()]
    fresh = MagicMock()
    fresh.run.return_value = "Complete Save"

    with patch(
        "palworld_rcon.transport.rcon_connection.SourceClient",
        side_effect=[stale, fresh],
    ) as cls:
        client = Client(ADDRESS, "secret")
        client.save()
        client.save()

    assert cls.call_count == 2
    stale.close.assert_called_once()
    fresh.run.assert_called_once_with("Save")
    assert client.connected
