"""Typed inbound messages.

The simulator tags every frame with a ``type`` discriminator. Status
frames carry one record per automaton node::

    {"type": "status_update", "success": true,
     "data": {"n1": {"current_state": "A0", "time_step": 4, ...}}}

Only the first node drives the displayed state, so only that node is
validated. Its informational fields are best effort and never reject a
frame.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, field_validator

from fsplink.models._base import FspBaseModel


def _safe_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> int | None:
    number = _safe_float(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


class NodeStatus(FspBaseModel):
    """State of one node in the firing squad line."""

    current_state: str = Field(..., min_length=1)
    topology_established: bool | None = None
    fsp_active: bool | None = None
    time_step: float | None = None
    max_time: float | None = None
    role: str | None = None
    position: int | None = None
    is_general: bool | None = None

    @field_validator("time_step", "max_time", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float | None:
        return _safe_float(value)

    @field_validator("position", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        return _safe_int(value)

    @field_validator("topology_established", "fsp_active", "is_general", mode="before")
    @classmethod
    def _coerce_bool(cls, value: Any) -> bool | None:
        return value if isinstance(value, bool) else None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class StatusUpdate(FspBaseModel):
    """Periodic node status broadcast.

    ``fsp_status_update`` is the tag used by older simulator builds. The
    first entry of ``data`` is a :class:`NodeStatus`; later entries are
    kept as received.
    """

    type: Literal["status_update", "fsp_status_update"]
    success: bool | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data")
    @classmethod
    def _validate_primary_node(cls, data: dict[str, Any]) -> dict[str, Any]:
        for name, node in data.items():
            return {**data, name: NodeStatus.model_validate(node)}
        return data

    @property
    def primary_node(self) -> tuple[str, NodeStatus] | None:
        """First node in document order, or ``None`` for an empty update."""
        for name, node in self.data.items():
            return name, node
        return None

    @property
    def current_state(self) -> str | None:
        primary = self.primary_node
        return primary[1].current_state if primary is not None else None


class CommandResponse(FspBaseModel):
    """Acknowledgement for a previously sent command. Informational only."""

    type: Literal["command_response"]
    command: str | None = None
    success: bool | None = None
    message: str | None = None


class UnknownMessage(FspBaseModel):
    """Any frame whose ``type`` is not recognised."""

    type: str


IncomingMessage = StatusUpdate | CommandResponse | UnknownMessage
