"""Outbound command payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Command(BaseModel):
    """A single upstream command, serialized verbatim as ``{"command": <name>}``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(..., min_length=1)

    def to_frame(self) -> str:
        """Compact JSON text frame for the transport."""
        return self.model_dump_json()
