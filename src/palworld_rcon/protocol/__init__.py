"""Protocol layer: command builders and response decoders."""

from .commands import Command, build_command
from .parser import (
    parse_ban,
    parse_broadcast,
    parse_do_exit,
    parse_info,
    parse_kick,
    parse_save,
    parse_show_players,
    parse_shutdown,
)
