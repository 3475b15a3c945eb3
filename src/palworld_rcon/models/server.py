"""Server information model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerInfo:
    """Name and version reported by the ``Info`` command."""

    name: str
    version: str

    def to_dict(self) -> dict:
        return {"name": self.name, "version": self.version}
