"""Subscriber interface consumed by rendering adapters."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol, runtime_checkable


@runtime_checkable
class Subscriber(Protocol):
    """A rendering target that reflects the current state token.

    ``notify`` may be a plain method or a coroutine function. Raising from
    it (for example because the target no longer exists) unsubscribes the
    handle. Handles must be hashable.
    """

    def notify(self, state: str) -> Awaitable[None] | None: ...
