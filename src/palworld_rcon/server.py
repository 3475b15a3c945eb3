"""MCP server entry point for Palworld server administration.

Exposes the RCON commands as tools via the Model Context Protocol using the
official Python MCP SDK with stdio transport. The server to administer is
configured through the ``PALWORLD_RCON_ADDRESS`` and
``PALWORLD_RCON_PASSWORD`` environment variables.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP
from rcon.exceptions import EmptyResponse, SessionTimeout, UnexpectedTerminator

from .client import Client
from .errors import RconError

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1:25575"

mcp = FastMCP(
    "palworld-rcon",
    instructions="Administer a Palworld dedicated server over RCON",
)

# Failures reported back to the caller as {"error": ...}
_FAILURES = (
    RconError,
    OSError,
    EOFError,
    EmptyResponse,
    SessionTimeout,
    UnexpectedTerminator,
)

# Global connection state
_client: Client | None = None


def _get_client() -> Client:
    """Get the shared RCON client, creating it from the environment."""
    global _client
    if _client is None:
        password = os.environ.get("PALWORLD_RCON_PASSWORD")
        if not password:
            raise RuntimeError(
                "PALWORLD_RCON_PASSWORD is not set. Export the server's "
                "AdminPassword before starting the MCP server."
            )
        address = os.environ.get("PALWORLD_RCON_ADDRESS", DEFAULT_ADDRESS)
        _client = Client(address, password)
        logger.info("Using RCON server at %s", address)
    return _client


def _error(e: Exception) -> dict[str, str]:
    logger.warning("RCON command failed: %s", e)
    return {"error": str(e)}


# ─── SERVER TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def get_server_info() -> dict[str, Any]:
    """Retrieve the server name and version (RCON ``Info``)."""
    try:
        return _get_client().info().to_dict()
    except _FAILURES as e:
        return _error(e)


@mcp.tool()
def list_players() -> dict[str, Any]:
    """List the players currently online with their player UID and Steam ID."""
    try:
        players = _get_client().show_players()
    except _FAILURES as e:
        return _error(e)
    return {"count": len(players), "players": [p.to_dict() for p in players]}


@mcp.tool()
def save_world() -> dict[str, Any]:
    """Save the world to disk."""
    try:
        _get_client().save()
    except _FAILURES as e:
        return _error(e)
    return {"saved": True}


@mcp.tool()
def run_command(command: str) -> dict[str, Any]:
    """Run a raw RCON command and return the server's reply.

    Args:
        command: Command line, e.g. "ShowPlayers".
    """
    try:
        response = _get_client().execute(command)
    except _FAILURES as e:
        return _error(e)
    return {"command": command, "response": response}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the RCON connection. The next tool call reconnects."""
    if _client is not None:
        try:
            _client.close()
        except OSError as e:
            logger.warning("Error closing RCON connection: %s", e)
    return {"disconnected": True}


# ─── PLAYER TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def broadcast(message: str) -> dict[str, Any]:
    """Display a message to all online players.

    Args:
        message: Single-line text to broadcast.
    """
    try:
        _get_client().broadcast(message)
    except (*_FAILURES, ValueError) as e:
        return _error(e)
    return {"broadcast": True, "message": message}


@mcp.tool()
def kick_player(steam_id: int) -> dict[str, Any]:
    """Kick an online player.

    Args:
        steam_id: The player's 64-bit Steam ID (see list_players).
    """
    try:
        _get_client().kick_player(steam_id)
    except (*_FAILURES, TypeError, ValueError) as e:
        return _error(e)
    return {"kicked": True, "steam_id": steam_id}


@mcp.tool()
def ban_player(steam_id: int) -> dict[str, Any]:
    """Ban an online player.

    Args:
        steam_id: The player's 64-bit Steam ID (see list_players).
    """
    try:
        _get_client().ban_player(steam_id)
    except (*_FAILURES, TypeError, ValueError) as e:
        return _error(e)
    return {"banned": True, "steam_id": steam_id}


# ─── SHUTDOWN TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def shutdown_server(seconds: int = 60, message: str | None = None) -> dict[str, Any]:
    """Shut the server down after a delay.

    Args:
        seconds: Delay in seconds (default 60).
        message: Optional notice shown to online players.
    """
    try:
        _get_client().shutdown(seconds, message)
    except (*_FAILURES, TypeError, ValueError) as e:
        return _error(e)
    return {"shutdown": True, "seconds": seconds}


@mcp.tool()
def force_exit() -> dict[str, Any]:
    """Stop the server immediately without waiting for players."""
    try:
        _get_client().do_exit()
    except _FAILURES as e:
        return _error(e)
    return {"exited": True}


# ─── PROMPTS ──────────────────────────────────────────────────────────

@mcp.prompt()
def scheduled_restart(minutes: int = 5) -> str:
    """Walk through a polite restart of the server."""
    return f"""Restart the Palworld server in {minutes} minutes.

1. Use list_players to see who is online.
2. Use broadcast to warn players about the restart.
3. Use save_world to save the world.
4. Use shutdown_server with seconds={minutes * 60} and a short message."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
