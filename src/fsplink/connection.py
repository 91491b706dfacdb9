"""Connection supervisor for the upstream simulator link.

Owns:
- the single live :class:`~fsplink._transport.Link` and its connect guard
- the fixed-interval reconnect timer
- the receive-silence liveness monitor
- the frame reader and the dispatcher that feeds the state store

Everything runs as tasks on one event loop, which serializes all changes to
the link and the connect guard without locks. The reader only stamps,
decodes and queues frames, so slow subscribers never delay the liveness
signal. A broadcast that has started runs to completion even when the
link is dropped underneath it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import StrEnum

from fsplink._redact import redact_for_log, truncate_for_log
from fsplink._transport import Link
from fsplink.config import FspConfig
from fsplink.exceptions import FspTransportError
from fsplink.ingestion.decoder import decode_frame
from fsplink.models.messages import CommandResponse, IncomingMessage, StatusUpdate
from fsplink.state.store import StateStore


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def _cancel(task: asyncio.Task[None] | None) -> asyncio.Task[None] | None:
    """Cancel *task* unless it is the caller. Returns it when it was cancelled."""
    if task is None or task.done() or task is asyncio.current_task():
        return None
    task.cancel()
    return task


class ConnectionManager:
    """Keeps one logical connection to the simulator alive.

    ``connect()`` schedules an attempt and returns immediately. Failed
    attempts and lost connections are retried every
    ``config.reconnect_interval`` seconds until ``shutdown()``.
    """

    def __init__(
        self,
        config: FspConfig,
        *,
        link_factory: Callable[[], Link],
        store: StateStore,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._link_factory = link_factory
        self._store = store
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

        self._link: Link | None = None
        self._connecting = False
        self._stopped = False
        self._last_received: float | None = None

        self._connect_task: asyncio.Task[None] | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._dispatch_task: asyncio.Task[None] | None = None
        self._liveness_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def state(self) -> ConnectionState:
        if self._connecting:
            return ConnectionState.CONNECTING
        if self._link is not None:
            return ConnectionState.CONNECTED
        return ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @property
    def link(self) -> Link | None:
        """The live link while connected, else ``None``."""
        return self._link

    @property
    def seconds_since_last_frame(self) -> float | None:
        if self._link is None or self._last_received is None:
            return None
        return self._clock() - self._last_received

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Start a connection attempt unless one is in flight or already up.

        Must be called from the running event loop.
        """
        loop = asyncio.get_running_loop()
        if self._connecting:
            self._logger.debug("Connect requested while connecting; ignored")
            return
        if self._link is not None:
            self._logger.debug("Connect requested while connected; ignored")
            return

        self._connecting = True
        self._stopped = False
        _cancel(self._reconnect_task)
        self._reconnect_task = None
        self._logger.info("Attempting to connect to %s", self._config.url)
        self._connect_task = loop.create_task(self._open_link(), name="fsplink-connect")

    async def shutdown(self) -> None:
        """Stop timers, close the link and revert to the sentinel state.

        No reconnect happens afterwards until ``connect()`` is called again.
        """
        self._logger.info("Disconnecting from %s", self._config.url)
        self._stopped = True

        cancelled = [
            task
            for task in (
                _cancel(self._reconnect_task),
                _cancel(self._liveness_task),
                _cancel(self._connect_task),
                _cancel(self._reader_task),
                _cancel(self._dispatch_task),
            )
            if task is not None
        ]
        self._reconnect_task = None
        self._liveness_task = None
        self._connect_task = None
        self._reader_task = None
        self._dispatch_task = None

        link = self._link
        self._link = None
        self._connecting = False

        if cancelled:
            await asyncio.gather(*cancelled, return_exceptions=True)
        if link is not None:
            await link.close()
        await self._store.reset()

    # ------------------------------------------------------------------
    # Connect / disconnect handling
    # ------------------------------------------------------------------

    async def _open_link(self) -> None:
        link = self._link_factory()
        try:
            await link.open()
        except asyncio.CancelledError:
            await link.close()
            raise
        except FspTransportError as exc:
            self._logger.info("Connection to %s failed: %s", self._config.url, exc)
            await self._on_connect_failed(link)
            return
        except Exception:
            self._logger.warning("Unexpected error connecting to %s", self._config.url, exc_info=True)
            await self._on_connect_failed(link)
            return

        self._connecting = False
        self._connect_task = None
        self._link = link
        self._last_received = self._clock()
        _cancel(self._reconnect_task)
        self._reconnect_task = None
        self._logger.info("Connected to %s", self._config.url)

        loop = asyncio.get_running_loop()
        self._liveness_task = loop.create_task(self._monitor_liveness(link), name="fsplink-liveness")
        await self._store.reset()
        # Shut down or dropped while subscribers were being reset.
        if self._link is not link:
            return
        inbox: asyncio.Queue[IncomingMessage] = asyncio.Queue()
        self._dispatch_task = loop.create_task(self._dispatch_messages(inbox), name="fsplink-dispatch")
        self._reader_task = loop.create_task(self._read_frames(link, inbox), name="fsplink-reader")

    async def _on_connect_failed(self, link: Link) -> None:
        self._connecting = False
        self._connect_task = None
        await link.close()
        await self._store.reset()
        self._start_reconnect()

    async def _on_link_lost(self, link: Link, reason: str) -> None:
        if link is not self._link:
            return
        self._link = None
        _cancel(self._liveness_task)
        _cancel(self._reader_task)
        _cancel(self._dispatch_task)
        self._liveness_task = None
        self._reader_task = None
        self._dispatch_task = None

        self._logger.info(
            "Disconnected from %s (%s), retrying every %.1fs",
            self._config.url,
            reason,
            self._config.reconnect_interval,
        )
        await link.close()
        await self._store.reset()
        self._start_reconnect()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_reconnect(self) -> None:
        if self._stopped or self._connecting or self._link is not None:
            return
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._logger.debug("Starting reconnect timer interval=%.1fs", self._config.reconnect_interval)
        self._reconnect_task = asyncio.get_running_loop().create_task(
            self._reconnect_loop(),
            name="fsplink-reconnect",
        )

    async def _reconnect_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.reconnect_interval)
            if self._connecting or self._link is not None:
                continue
            self.connect()
            # connect() hands the timer off; a failed attempt starts a new one.
            if self._reconnect_task is not asyncio.current_task():
                return

    async def _monitor_liveness(self, link: Link) -> None:
        while link is self._link:
            await asyncio.sleep(self._config.liveness_check_interval)
            if link is not self._link or self._last_received is None:
                return
            silence = self._clock() - self._last_received
            if silence > self._config.liveness_timeout:
                self._logger.info("No frame received for %.1fs, closing connection", silence)
                await self._on_link_lost(link, "liveness timeout")
                return

    # ------------------------------------------------------------------
    # Inbound frames
    # ------------------------------------------------------------------

    async def _read_frames(self, link: Link, inbox: asyncio.Queue[IncomingMessage]) -> None:
        reason = "closed by remote"
        try:
            async for frame in link.frames():
                self._last_received = self._clock()
                if self._config.frame_trace_enabled:
                    self._logger.debug("Frame received %r", truncate_for_log(str(frame)))
                result = decode_frame(frame)
                if result.message is not None:
                    inbox.put_nowait(result.message)
        except FspTransportError as exc:
            reason = str(exc)
        except Exception as exc:
            self._logger.warning("Unexpected error reading from %s", self._config.url, exc_info=True)
            reason = f"unexpected error: {exc}"
        else:
            # Frames that arrived before a clean close still reach subscribers.
            await inbox.join()
        await self._on_link_lost(link, reason)

    async def _dispatch_messages(self, inbox: asyncio.Queue[IncomingMessage]) -> None:
        while True:
            message = await inbox.get()
            try:
                await self._dispatch(message)
            except Exception:
                self._logger.warning("Failed to dispatch %s message", message.type, exc_info=True)
            finally:
                inbox.task_done()

    async def _dispatch(self, message: IncomingMessage) -> None:
        if isinstance(message, StatusUpdate):
            state = message.current_state
            if state is None:
                self._logger.debug("Status update without nodes; ignored")
                return
            # Cancelling the dispatcher drops queued frames, not this broadcast.
            await asyncio.shield(self._store.update(state))
            return
        if isinstance(message, CommandResponse):
            self._logger.info("Command response: %s", redact_for_log(message.raw))
            return
        self._logger.debug("Ignoring message type=%s", message.type)
