"""fsplink - Resilient asyncio client for the FSP simulator status feed."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fsplink")
except PackageNotFoundError:
    __version__ = "0+local"
from fsplink._constants import RESTART_COMMAND, SENTINEL_STATE
from fsplink.client import FspClient
from fsplink.commands import CommandChannel
from fsplink.config import FspConfig
from fsplink.connection import ConnectionManager, ConnectionState
from fsplink.exceptions import (
    FspConfigError,
    FspDecodeError,
    FspError,
    FspNotConnectedError,
    FspTransportError,
)
from fsplink.ingestion import DecodeResult, decode_frame
from fsplink.models import Command, CommandResponse, NodeStatus, StatusUpdate, UnknownMessage
from fsplink.state import StateStore, StateValue, Subscriber

__all__ = [
    "__version__",
    "Command",
    "CommandChannel",
    "CommandResponse",
    "ConnectionManager",
    "ConnectionState",
    "DecodeResult",
    "FspClient",
    "FspConfig",
    "FspConfigError",
    "FspDecodeError",
    "FspError",
    "FspNotConnectedError",
    "FspTransportError",
    "NodeStatus",
    "RESTART_COMMAND",
    "SENTINEL_STATE",
    "StateStore",
    "StateValue",
    "StatusUpdate",
    "Subscriber",
    "UnknownMessage",
    "decode_frame",
]
