"""Response decoders.

Every decoder takes the whitespace-trimmed response text of one command and
either returns the decoded value or raises. A response that does not look
like the command's success message raises
:class:`~palworld_rcon.errors.UnexpectedResponseError`; a response of the
right shape with a field that cannot be decoded raises
:class:`~palworld_rcon.errors.ParseError`.
"""

from __future__ import annotations

import csv
import io
import re

from ..errors import ParseError, UnexpectedResponseError
from ..models import Player, ServerInfo
from .commands import MAX_UINT64

INFO_PATTERN = re.compile(r"Welcome to Pal Server\[v([0-9.]+)\]\s*(.*)")

_UINT_PATTERN = re.compile(r"[0-9]+")

PLAYER_COLUMNS = 3

BAN_PREFIX = "Baned: "  # sic, the server misspells it
BROADCAST_PREFIX = "Broadcasted: "
KICK_PREFIX = "Kicked: "
SHUTDOWN_PREFIX = "The server will shut down"
DO_EXIT_RESPONSE = "Shutdown..."
SAVE_RESPONSE = "Complete Save"


def _expect_prefix(response: str, prefix: str, action: str) -> None:
    if not response.startswith(prefix):
        raise UnexpectedResponseError(f"failed to {action}: {response}", response)


def _expect_exact(response: str, expected: str, action: str) -> None:
    if response != expected:
        raise UnexpectedResponseError(f"failed to {action}: {response}", response)


def parse_ban(response: str) -> None:
    _expect_prefix(response, BAN_PREFIX, "ban player")


def parse_broadcast(response: str) -> None:
    _expect_prefix(response, BROADCAST_PREFIX, "broadcast")


def parse_do_exit(response: str) -> None:
    _expect_exact(response, DO_EXIT_RESPONSE, "shut down")


def parse_kick(response: str) -> None:
    _expect_prefix(response, KICK_PREFIX, "kick player")


def parse_save(response: str) -> None:
    _expect_exact(response, SAVE_RESPONSE, "save")


def parse_shutdown(response: str) -> None:
    _expect_prefix(response, SHUTDOWN_PREFIX, "shut down")


def parse_info(response: str) -> ServerInfo:
    """Parse the ``Info`` greeting.

    The server answers ``Welcome to Pal Server[v0.1.5.1] My Server``; the
    version is the dotted number between the brackets and the name is the
    rest of the line.
    """
    match = INFO_PATTERN.fullmatch(response)
    if match is None:
        raise ParseError(f"failed to parse Info output: {response}", response)
    return ServerInfo(name=match.group(2), version=match.group(1))


def parse_uint64(value: str, field: str) -> int:
    """Decode a base-10 unsigned 64-bit integer, raising ParseError otherwise."""
    if not _UINT_PATTERN.fullmatch(value):
        raise ParseError(f"failed to parse {field}: {value!r}", value)
    number = int(value)
    if number > MAX_UINT64:
        raise ParseError(f"failed to parse {field}: {value!r} out of range", value)
    return number


def parse_show_players(response: str) -> list[Player]:
    """Parse the ``ShowPlayers`` CSV table.

    The first row is a header (``name,playeruid,steamid``) and is skipped.
    Every following row must have exactly three columns. Blank lines are
    ignored.
    """
    reader = csv.reader(io.StringIO(response), strict=True)
    try:
        rows = [row for row in reader if row]
    except csv.Error as e:
        raise ParseError(
            f"failed to parse ShowPlayers response as CSV: {e}", response
        ) from e

    if not rows:
        raise ParseError("failed to parse ShowPlayers response: missing header", response)

    players = []
    for row in rows[1:]:
        line = ",".join(row)
        if len(row) != PLAYER_COLUMNS:
            raise ParseError(f"failed to parse player output: {row}", line)
        name, player_uid, steam_id = row
        players.append(
            Player(
                name=name,
                player_uid=parse_uint64(player_uid, "player UID"),
                steam_id=parse_uint64(steam_id, "steam ID"),
            )
        )
    return players
