"""Transport layer: the authenticated RCON socket."""

from .rcon_connection import Connection, RconConnection, dial, split_address
