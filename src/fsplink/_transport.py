"""WebSocket transport link to the FSP simulator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import aiohttp

from fsplink.config import FspConfig
from fsplink.exceptions import FspNotConnectedError, FspTransportError

_logger = logging.getLogger(__name__)


class Link(Protocol):
    """Structural transport interface used by the connection supervisor.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`WebSocketLink`) concrete.
    """

    @property
    def closed(self) -> bool: ...

    async def open(self) -> None: ...

    def frames(self) -> AsyncIterator[str | bytes]: ...

    async def send_str(self, data: str) -> None: ...

    async def close(self) -> None: ...


class WebSocketLink:
    """One physical WebSocket connection. Not reusable after close."""

    def __init__(self, config: FspConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._ws: aiohttp.ClientWebSocketResponse | None = None

    @property
    def closed(self) -> bool:
        return self._ws is None or self._ws.closed

    async def open(self) -> None:
        """Perform the handshake, bounded by ``config.open_timeout``."""
        url = self._config.url
        _logger.debug("WS connect %s", url)
        try:
            async with asyncio.timeout(self._config.open_timeout):
                self._ws = await self._http.ws_connect(
                    url,
                    heartbeat=self._config.heartbeat,
                    autoping=True,
                )
        except TimeoutError as exc:
            raise FspTransportError(
                f"Handshake with {url} timed out after {self._config.open_timeout}s",
                url=url,
            ) from exc
        except (aiohttp.ClientError, OSError) as exc:
            raise FspTransportError(f"Connect to {url} failed: {exc}", url=url) from exc

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames until the connection closes.

        Raises :class:`FspTransportError` on a protocol error.
        """
        ws = self._ws
        if ws is None:
            raise FspNotConnectedError("Link is not open")
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                # Decoder handles non-UTF-8 payloads.
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise FspTransportError(
                    f"WebSocket error from {self._config.url}: {ws.exception()}",
                    url=self._config.url,
                    close_code=ws.close_code,
                )
        _logger.debug("WS stream from %s ended close_code=%s", self._config.url, ws.close_code)

    async def send_str(self, data: str) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            raise FspNotConnectedError(f"Link to {self._config.url} is not open")
        try:
            await ws.send_str(data)
        except (aiohttp.ClientError, ConnectionError) as exc:
            raise FspTransportError(f"Send to {self._config.url} failed: {exc}", url=self._config.url) from exc

    async def close(self) -> None:
        """Close the socket. Safe to call repeatedly or before ``open``."""
        ws = self._ws
        if ws is None or ws.closed:
            return
        try:
            await ws.close()
        except (aiohttp.ClientError, OSError):
            _logger.debug("WS close failed", exc_info=True)
