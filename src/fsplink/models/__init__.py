"""Data models for FSP simulator messages."""

from fsplink.models._base import FspBaseModel
from fsplink.models.command import Command
from fsplink.models.messages import CommandResponse, IncomingMessage, NodeStatus, StatusUpdate, UnknownMessage

__all__ = [
    "Command",
    "CommandResponse",
    "FspBaseModel",
    "IncomingMessage",
    "NodeStatus",
    "StatusUpdate",
    "UnknownMessage",
]
