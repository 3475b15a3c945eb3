"""Command names and raw command string builders.

Arguments are interpolated as plain text separated by single spaces; the
server has no quoting or escaping rules.
"""

from __future__ import annotations

from enum import Enum

MAX_UINT64 = 2**64 - 1


class Command(str, Enum):
    """RCON command names understood by the Palworld dedicated server."""

    BAN_PLAYER = "BanPlayer"
    BROADCAST = "Broadcast"
    DO_EXIT = "DoExit"
    INFO = "Info"
    KICK_PLAYER = "KickPlayer"
    SAVE = "Save"
    SHOW_PLAYERS = "ShowPlayers"
    SHUTDOWN = "Shutdown"


def build_command(command: Command, *args: object) -> str:
    """Join a command name and its arguments into a raw command line."""
    return " ".join([command.value, *(str(arg) for arg in args)])


def _check_steam_id(steam_id: int) -> int:
    if isinstance(steam_id, bool) or not isinstance(steam_id, int):
        raise TypeError(f"Steam ID must be an int, got {type(steam_id).__name__}")
    if not 0 <= steam_id <= MAX_UINT64:
        raise ValueError(f"Steam ID must be 0-{MAX_UINT64}, got {steam_id}")
    return steam_id


def _check_message(message: str) -> str:
    if not message:
        raise ValueError("Message must not be empty")
    if "\n" in message or "\r" in message:
        raise ValueError("Message must be a single line")
    return message


def build_ban_player(steam_id: int) -> str:
    """Build ``BanPlayer <steamID>``. The player must be online."""
    return build_command(Command.BAN_PLAYER, _check_steam_id(steam_id))


def build_kick_player(steam_id: int) -> str:
    """Build ``KickPlayer <steamID>``."""
    return build_command(Command.KICK_PLAYER, _check_steam_id(steam_id))


def build_broadcast(message: str) -> str:
    """Build ``Broadcast <message>``."""
    return build_command(Command.BROADCAST, _check_message(message))


def build_shutdown(seconds: int, message: str | None = None) -> str:
    """Build a timed shutdown command.

    Args:
        seconds: Delay before the server shuts down (>= 0).
        message: Optional notice displayed to all online players.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise TypeError(f"Seconds must be an int, got {type(seconds).__name__}")
    if seconds < 0:
        raise ValueError(f"Seconds must be >= 0, got {seconds}")
    if message is None:
        return build_command(Command.SHUTDOWN, seconds)
    return build_command(Command.SHUTDOWN, seconds, _check_message(message))


def build_do_exit() -> str:
    return build_command(Command.DO_EXIT)


def build_info() -> str:
    return build_command(Command.INFO)


def build_save() -> str:
    return build_command(Command.SAVE)


def build_show_players() -> str:
    return build_command(Command.SHOW_PLAYERS)
