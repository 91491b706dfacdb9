"""Outbound command channel."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from fsplink.connection import ConnectionManager
from fsplink.exceptions import FspError, FspNotConnectedError
from fsplink.models.command import Command

_logger = logging.getLogger(__name__)


class CommandChannel:
    """Sends commands upstream while, and only while, the link is connected.

    Commands represent momentary user intent, so nothing is queued for a
    later reconnect.
    """

    def __init__(self, connection: ConnectionManager) -> None:
        self._connection = connection

    async def send(self, command: str | Command) -> None:
        """Send *command* as ``{"command": ...}``.

        Raises
        ------
        FspNotConnectedError
            The link is not connected; no I/O was performed.
        FspError
            *command* is empty.
        FspTransportError
            The link failed while sending.
        """
        name = command.command if isinstance(command, Command) else command
        link = self._connection.link
        if link is None or not self._connection.is_connected:
            _logger.warning("Not connected to %s, dropping command %r", self._connection.url, name)
            raise FspNotConnectedError(f"Cannot send {name!r}: not connected to {self._connection.url}")

        try:
            payload = command if isinstance(command, Command) else Command(command=command)
        except ValidationError as exc:
            raise FspError(f"Invalid command {command!r}") from exc
        frame = payload.to_frame()

        _logger.debug("Sending command %s", frame)
        await link.send_str(frame)
