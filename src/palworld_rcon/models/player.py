"""Online player model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Player:
    """A single row of the ``ShowPlayers`` table.

    ``player_uid`` and ``steam_id`` are unsigned 64-bit integers.
    """

    name: str
    player_uid: int
    steam_id: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "player_uid": self.player_uid,
            "steam_id": self.steam_id,
        }
