"""High-level async client for the FSP simulator."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from fsplink._constants import RESTART_COMMAND
from fsplink._transport import Link, WebSocketLink
from fsplink.commands import CommandChannel
from fsplink.config import FspConfig
from fsplink.connection import ConnectionManager, ConnectionState
from fsplink.exceptions import FspError
from fsplink.models.command import Command
from fsplink.state.store import StateStore, StateValue
from fsplink.state.subscribers import Subscriber

_logger = logging.getLogger(__name__)


class FspClient:
    """Async client for the FSP simulator status feed.

    Usage::

        async with FspClient(FspConfig.from_env()) as client:
            await client.subscribe(key)
            client.connect()
            ...
    """

    def __init__(
        self,
        config: FspConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        link_factory: Callable[[], Link] | None = None,
        store: StateStore | None = None,
    ) -> None:
        self._config = config or FspConfig()
        self._external_session = session is not None
        self._http_session = session
        self._link_factory = link_factory
        self._store = store or StateStore()
        self._connection: ConnectionManager | None = None
        self._commands: CommandChannel | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FspClient:
        link_factory = self._link_factory
        if link_factory is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            http_session = self._http_session

            def _websocket_link() -> Link:
                return WebSocketLink(self._config, http_session)

            link_factory = _websocket_link

        self._connection = ConnectionManager(
            self._config,
            link_factory=link_factory,
            store=self._store,
            logger=_logger,
        )
        self._commands = CommandChannel(self._connection)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._connection is not None:
            await self._connection.shutdown()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._connection = None
        self._commands = None

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def config(self) -> FspConfig:
        return self._config

    @property
    def state(self) -> StateValue:
        """Last state token received (the sentinel while disconnected)."""
        return self._store.current

    @property
    def connection_state(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    def connect(self) -> None:
        """Start connecting in the background; reconnects automatically."""
        self._require_connection().connect()

    async def shutdown(self) -> None:
        """Close the connection and stop reconnecting."""
        await self._require_connection().shutdown()

    async def subscribe(self, handle: Subscriber) -> bool:
        """Register *handle* and deliver the current state to it right away."""
        return await self._store.subscribe(handle)

    def unsubscribe(self, handle: Subscriber) -> bool:
        return self._store.unsubscribe(handle)

    async def send_command(self, command: str | Command) -> None:
        """Fire-and-forget a command; raises ``FspNotConnectedError`` when down."""
        if self._commands is None:
            raise FspError("Client not initialized. Use 'async with FspClient(...) as client:'")
        await self._commands.send(command)

    async def restart(self) -> None:
        """Ask the simulator to restart the firing squad run."""
        await self.send_command(RESTART_COMMAND)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_connection(self) -> ConnectionManager:
        if self._connection is None:
            raise FspError("Client not initialized. Use 'async with FspClient(...) as client:'")
        return self._connection
