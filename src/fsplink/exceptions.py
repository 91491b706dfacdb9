"""Custom exception hierarchy for fsplink."""

from __future__ import annotations


class FspError(Exception):
    """Base exception for all fsplink errors."""


class FspConfigError(FspError):
    """Invalid or missing configuration."""


class FspTransportError(FspError):
    """WebSocket-level failure (connect refused, reset, protocol error)."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        close_code: int | None = None,
    ) -> None:
        self.url = url
        self.close_code = close_code
        super().__init__(message)


class FspNotConnectedError(FspError):
    """A command was issued while the upstream link is not connected.

    Commands are fire-and-forget: nothing is queued or retried, the
    caller decides whether the intent is still meaningful later.
    """


class FspDecodeError(FspError):
    """An inbound frame could not be decoded into a typed message."""

    def __init__(self, message: str, *, frame: str = "") -> None:
        self.frame = frame
        super().__init__(message)
