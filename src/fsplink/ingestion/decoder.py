"""Frame decoder.

Connection machinery must never depend on payload correctness, so
:func:`decode_frame` never raises: malformed input is logged and reported
through :class:`DecodeResult`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from fsplink._constants import COMMAND_RESPONSE_TYPE, STATUS_UPDATE_TYPES
from fsplink._redact import redact_for_log, truncate_for_log
from fsplink.exceptions import FspDecodeError
from fsplink.models._base import FspBaseModel
from fsplink.models.messages import CommandResponse, IncomingMessage, StatusUpdate, UnknownMessage

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Outcome of decoding one frame: a message or the reason there is none."""

    message: IncomingMessage | None
    error: FspDecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.message is not None


def _model_for(type_value: str) -> type[FspBaseModel]:
    if type_value in STATUS_UPDATE_TYPES:
        return StatusUpdate
    if type_value == COMMAND_RESPONSE_TYPE:
        return CommandResponse
    return UnknownMessage


def _parse(text: str) -> IncomingMessage:
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FspDecodeError(f"Frame is not valid JSON: {exc}", frame=text) from exc

    if not isinstance(payload, dict):
        raise FspDecodeError(f"Frame is {type(payload).__name__}, expected a JSON object", frame=text)

    type_value = payload.get("type")
    if not isinstance(type_value, str) or not type_value:
        raise FspDecodeError("Frame has no string 'type' discriminator", frame=text)

    model = _model_for(type_value)
    try:
        message = model.model_validate(payload)
    except ValidationError as exc:
        raise FspDecodeError(
            f"Invalid {type_value} payload: {exc.error_count()} validation error(s)",
            frame=text,
        ) from exc

    if isinstance(message, StatusUpdate) and len(message.data) > 1:
        primary = message.primary_node
        _logger.warning(
            "Status update carries %d nodes; using first node %s and ignoring the rest",
            len(message.data),
            primary[0] if primary else None,
        )
    return message  # type: ignore[return-value]


def decode_frame(frame: str | bytes) -> DecodeResult:
    """Decode a single text frame into a typed message."""
    if isinstance(frame, bytes):
        try:
            text = frame.decode("utf-8")
        except UnicodeDecodeError as exc:
            error = FspDecodeError(f"Frame is not UTF-8: {exc}")
            _logger.warning("Failed to decode frame %s: %s", redact_for_log(frame), error)
            return DecodeResult(message=None, error=error)
    else:
        text = frame

    try:
        message = _parse(text)
    except FspDecodeError as error:
        _logger.warning("Failed to decode frame %r: %s", truncate_for_log(text, max_string=200), error)
        return DecodeResult(message=None, error=error)
    return DecodeResult(message=message)
