"""Client configuration for fsplink."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from fsplink._constants import (
    DEFAULT_LIVENESS_CHECK_INTERVAL,
    DEFAULT_LIVENESS_TIMEOUT,
    DEFAULT_OPEN_TIMEOUT,
    DEFAULT_RECONNECT_INTERVAL,
    DEFAULT_URL,
)
from fsplink.exceptions import FspConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise FspConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FspConfig:
    """Client configuration.

    Parameters
    ----------
    url : str
        WebSocket endpoint of the FSP simulator.
    reconnect_interval : float
        Seconds between reconnect attempts while disconnected. The
        interval is fixed; there is no backoff.
    liveness_timeout : float
        Maximum silence, in seconds, tolerated on an open connection
        before it is presumed dead and force-closed.
    liveness_check_interval : float
        How often, in seconds, the silence is measured.
    open_timeout : float
        Upper bound in seconds for a single WebSocket handshake.
    heartbeat : float or None
        WebSocket ping interval in seconds, or ``None`` to disable
        protocol-level pings.
    frame_trace_enabled : bool
        Log every inbound frame at DEBUG level.
    """

    url: str = DEFAULT_URL
    reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL
    liveness_timeout: float = DEFAULT_LIVENESS_TIMEOUT
    liveness_check_interval: float = DEFAULT_LIVENESS_CHECK_INTERVAL
    open_timeout: float = DEFAULT_OPEN_TIMEOUT
    heartbeat: float | None = None
    frame_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise FspConfigError("url must be non-empty")
        for name in ("reconnect_interval", "liveness_timeout", "liveness_check_interval", "open_timeout"):
            if getattr(self, name) <= 0:
                raise FspConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.heartbeat is not None and self.heartbeat <= 0:
            raise FspConfigError(f"heartbeat must be positive or None, got {self.heartbeat}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FspConfig:
        """Create configuration from environment variables.

        Reads ``FSP_URL`` and the optional numeric ``FSP_*`` variables.
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FspConfig
            Populated configuration.

        Raises
        ------
        FspConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("FSP_URL")
        if url is not None:
            config_kwargs["url"] = url.strip()

        _ENV_FLOAT_MAP = {
            "FSP_RECONNECT_INTERVAL": "reconnect_interval",
            "FSP_LIVENESS_TIMEOUT": "liveness_timeout",
            "FSP_LIVENESS_CHECK_INTERVAL": "liveness_check_interval",
            "FSP_OPEN_TIMEOUT": "open_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        # An empty or zero heartbeat disables pings.
        heartbeat_env = env.get("FSP_HEARTBEAT")
        if heartbeat_env is not None and "heartbeat" not in overrides:
            heartbeat = _env_float("FSP_HEARTBEAT", heartbeat_env) if heartbeat_env.strip() else 0.0
            config_kwargs["heartbeat"] = heartbeat if heartbeat > 0 else None

        if "frame_trace_enabled" not in overrides:
            config_kwargs["frame_trace_enabled"] = _env_bool(env.get("FSP_FRAME_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
