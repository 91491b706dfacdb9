"""Log-safe rendering of inbound frames.

Frames come from an external process and can be arbitrarily large, so
anything logged from them goes through these helpers first.
"""

from __future__ import annotations

from typing import Any

_REDACTED = "<redacted>"
_SECRET_KEYS = frozenset({"password", "secret", "token", "accesstoken", "authorization", "cookie", "apikey"})


def truncate_for_log(text: str, *, max_string: int = 512) -> str:
    """Return *text* cut to *max_string* characters with a marker."""
    if len(text) > max_string:
        return f"{text[:max_string]}…<truncated>"
    return text


def _is_secret(key: object) -> bool:
    return str(key).lower().replace("_", "") in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Copy of a decoded JSON value with secret keys masked and long strings cut.

    Raw ``bytes`` are summarized by length.
    """
    if isinstance(value, dict):
        return {
            str(k): _REDACTED if _is_secret(k) else redact_for_log(v, max_string=max_string) for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(v, max_string=max_string) for v in value]
    if isinstance(value, str):
        return truncate_for_log(value, max_string=max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    return value
