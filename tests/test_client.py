"""End-to-end behaviour of the public client surface."""

from __future__ import annotations

import json

import pytest
from _fakes import FailingSubscriber, FakeLinkFactory, RecordingSubscriber, wait_until

from fsplink import FspClient, FspConfig, FspError, FspNotConnectedError
from fsplink._constants import SENTINEL_STATE
from fsplink.connection import ConnectionState


@pytest.mark.asyncio
async def test_duplicate_status_is_suppressed_end_to_end(
    fast_config: FspConfig, link_factory: FakeLinkFactory
) -> None:
    async with FspClient(fast_config, link_factory=link_factory) as client:
        key = RecordingSubscriber("key")
        client.connect()
        await wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
        await client.subscribe(key)
        key.received.clear()

        link = link_factory.latest
        link.feed('{"type":"status_update","data":{"n1":{"current_state":"A0"}}}')
        link.feed('{"type":"status_update","data":{"n1":{"current_state":"A0"}}}')
        link.feed('{"type":"status_update","data":{"n1":{"current_state":"T"}}}')

        await wait_until(lambda: client.state.value == "T")
        assert key.received == ["A0", "T"]


@pytest.mark.asyncio
async def test_late_subscriber_catches_up(fast_config: FspConfig, link_factory: FakeLinkFactory) -> None:
    async with FspClient(fast_config, link_factory=link_factory) as client:
        client.connect()
        await wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
        link_factory.latest.feed('{"type":"status_update","data":{"n1":{"current_state":"B1"}}}')
        await wait_until(lambda: client.state.value == "B1")

        late = RecordingSubscriber("late")
        await client.subscribe(late)

        assert late.received == ["B1"]


@pytest.mark.asyncio
async def test_vanished_subscriber_is_dropped(fast_config: FspConfig, link_factory: FakeLinkFactory) -> None:
    async with FspClient(fast_config, link_factory=link_factory) as client:
        gone = FailingSubscriber("gone", succeed=1)
        alive = RecordingSubscriber("alive")
        await client.subscribe(gone)
        await client.subscribe(alive)
        client.connect()
        await wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)

        link_factory.latest.feed('{"type":"status_update","data":{"n1":{"current_state":"Q"}}}')
        link_factory.latest.feed('{"type":"status_update","data":{"n1":{"current_state":"T"}}}')
        await wait_until(lambda: client.state.value == "T")

        assert alive.received == [SENTINEL_STATE, "Q", "T"]
        assert client.unsubscribe(gone) is False
        assert client.unsubscribe(alive) is True


@pytest.mark.asyncio
async def test_restart_command(fast_config: FspConfig, link_factory: FakeLinkFactory) -> None:
    async with FspClient(fast_config, link_factory=link_factory) as client:
        with pytest.raises(FspNotConnectedError):
            await client.restart()

        client.connect()
        await wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
        await client.restart()

        assert [json.loads(frame) for frame in link_factory.latest.sent] == [{"command": "restart"}]


@pytest.mark.asyncio
async def test_exit_shuts_down(fast_config: FspConfig, link_factory: FakeLinkFactory) -> None:
    key = RecordingSubscriber("key")
    async with FspClient(fast_config, link_factory=link_factory) as client:
        await client.subscribe(key)
        client.connect()
        await wait_until(lambda: client.connection_state is ConnectionState.CONNECTED)
        link_factory.latest.feed('{"type":"status_update","data":{"n1":{"current_state":"A5"}}}')
        await wait_until(lambda: client.state.value == "A5")

    assert link_factory.latest.closed
    assert client.state.is_sentinel
    assert key.received[-1] == SENTINEL_STATE
    assert client.connection_state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_requires_context_manager() -> None:
    client = FspClient()

    with pytest.raises(FspError):
        client.connect()
    with pytest.raises(FspError):
        await client.send_command("restart")


@pytest.mark.asyncio
async def test_owns_http_session_only_when_created() -> None:
    async with FspClient(FspConfig()) as client:
        session = client._http_session  # noqa: SLF001
        assert session is not None
        assert client.connection_state is ConnectionState.DISCONNECTED

    assert session.closed
