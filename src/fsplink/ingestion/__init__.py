"""Ingestion layer.

Turns raw frames received from the simulator into typed messages.
"""

from fsplink.ingestion.decoder import DecodeResult, decode_frame

__all__ = ["DecodeResult", "decode_frame"]
