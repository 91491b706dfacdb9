"""Single-value state store and broadcaster.

This is the only component allowed to change the current state token.
Broadcasts happen once per change, never for a repeat of the current value.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from fsplink._constants import SENTINEL_STATE
from fsplink.state.subscribers import Subscriber

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class StateValue:
    """Last state token received from upstream and when it was set."""

    value: str
    updated_at: datetime

    @property
    def is_sentinel(self) -> bool:
        return self.value == SENTINEL_STATE


class StateStore:
    """Holds the current state token and fans changes out to subscribers.

    The registry is insertion ordered and free of duplicates. A subscriber
    whose ``notify`` raises is dropped in the same pass without affecting
    delivery to the others.

    All broadcasts are serialized through one lock, so the broadcast for a
    value completes before the next value is applied. ``subscribe`` takes
    the same lock and must not be awaited from inside ``notify``.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._current = StateValue(SENTINEL_STATE, clock())
        # dict as an ordered set
        self._subscribers: dict[Subscriber, None] = {}
        self._lock = asyncio.Lock()

    @property
    def current(self) -> StateValue:
        return self._current

    @property
    def subscribers(self) -> tuple[Subscriber, ...]:
        return tuple(self._subscribers)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def update(self, state: str) -> bool:
        """Apply *state* and broadcast it if it differs from the current value.

        Returns ``True`` when a broadcast happened.
        """
        async with self._lock:
            if state == self._current.value:
                _logger.debug("State %s unchanged, skipping broadcast", state)
                return False

            previous = self._current.value
            self._current = StateValue(state, self._clock())
            _logger.debug(
                "State %s -> %s, notifying %d subscriber(s)",
                previous,
                state,
                len(self._subscribers),
            )
            for handle in list(self._subscribers):
                # May have been unsubscribed by an earlier handler in this pass.
                if handle in self._subscribers:
                    await self._deliver(handle, state)
            return True

    async def reset(self) -> bool:
        """Revert to the sentinel state."""
        return await self.update(SENTINEL_STATE)

    async def subscribe(self, handle: Subscriber) -> bool:
        """Register *handle* and immediately deliver the current value to it.

        Returns ``False`` when the catch-up delivery failed, in which case
        the handle is not registered.
        """
        async with self._lock:
            if handle not in self._subscribers:
                self._subscribers[handle] = None
                _logger.debug("Subscribed %r (total=%d)", handle, len(self._subscribers))
            return await self._deliver(handle, self._current.value)

    def unsubscribe(self, handle: Subscriber) -> bool:
        """Remove *handle*. Returns whether it was registered."""
        if handle not in self._subscribers:
            return False
        del self._subscribers[handle]
        _logger.debug("Unsubscribed %r (total=%d)", handle, len(self._subscribers))
        return True

    async def _deliver(self, handle: Subscriber, state: str) -> bool:
        try:
            result = handle.notify(state)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._subscribers.pop(handle, None)
            _logger.debug("Removed subscriber %r after failed delivery", handle, exc_info=True)
            return False
        return True
