"""Test doubles shared by the connection, command and client tests."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Callable

from fsplink.exceptions import FspNotConnectedError, FspTransportError

_CLOSED = object()


class FakeLink:
    """In-memory stand-in for WebSocketLink driven by the test."""

    def __init__(self, factory: FakeLinkFactory) -> None:
        self._factory = factory
        self._inbox: asyncio.Queue[object] = asyncio.Queue()
        self.opened = False
        self.closed = False
        self.sent: list[str] = []

    async def open(self) -> None:
        factory = self._factory
        factory.in_flight += 1
        factory.max_in_flight = max(factory.max_in_flight, factory.in_flight)
        try:
            if factory.gate is not None:
                await factory.gate.wait()
            if factory.fail_opens > 0:
                factory.fail_opens -= 1
                raise FspTransportError("connection refused", url="ws://fake")
            self.opened = True
        finally:
            factory.in_flight -= 1

    async def frames(self) -> AsyncIterator[str]:
        while True:
            item = await self._inbox.get()
            if item is _CLOSED:
                return
            if isinstance(item, Exception):
                raise item
            assert isinstance(item, str)
            yield item

    async def send_str(self, data: str) -> None:
        if not self.opened or self.closed:
            raise FspNotConnectedError("fake link not open")
        self.sent.append(data)

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(_CLOSED)

    # test helpers
    def feed(self, frame: str) -> None:
        self._inbox.put_nowait(frame)

    def remote_close(self) -> None:
        self._inbox.put_nowait(_CLOSED)

    def fail(self, exc: Exception) -> None:
        self._inbox.put_nowait(exc)


class FakeLinkFactory:
    def __init__(self) -> None:
        self.links: list[FakeLink] = []
        self.fail_opens = 0
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0
        self.attempt_times: list[float] = []

    def __call__(self) -> FakeLink:
        self.attempt_times.append(time.monotonic())
        link = FakeLink(self)
        self.links.append(link)
        return link

    @property
    def latest(self) -> FakeLink:
        return self.links[-1]


class RecordingSubscriber:
    def __init__(self, name: str = "sub") -> None:
        self.name = name
        self.received: list[str] = []

    def notify(self, state: str) -> None:
        self.received.append(state)

    def __repr__(self) -> str:
        return f"RecordingSubscriber({self.name})"


class AsyncRecordingSubscriber(RecordingSubscriber):
    async def notify(self, state: str) -> None:  # type: ignore[override]
        await asyncio.sleep(0)
        self.received.append(state)


class SlowSubscriber(RecordingSubscriber):
    """Takes *delay* seconds to handle *slow_on*, records everything."""

    def __init__(self, name: str = "slow", *, slow_on: str, delay: float) -> None:
        super().__init__(name)
        self._slow_on = slow_on
        self._delay = delay

    async def notify(self, state: str) -> None:  # type: ignore[override]
        if state == self._slow_on:
            await asyncio.sleep(self._delay)
        self.received.append(state)


class FailingSubscriber(RecordingSubscriber):
    """Raises on every delivery after the first *succeed* calls."""

    def __init__(self, name: str = "failing", *, succeed: int = 0) -> None:
        super().__init__(name)
        self._succeed = succeed

    def notify(self, state: str) -> None:
        if self._succeed <= 0:
            raise RuntimeError(f"{self.name} is gone")
        self._succeed -= 1
        super().notify(state)


def status_frame(state: str, node: str = "n1") -> str:
    return f'{{"type":"status_update","data":{{"{node}":{{"current_state":"{state}"}}}}}}'


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)

