"""State/store layer.

Holds the single last-known simulator state and is the only component
allowed to broadcast it to subscribers.
"""

from fsplink.state.store import StateStore, StateValue
from fsplink.state.subscribers import Subscriber

__all__ = ["StateStore", "StateValue", "Subscriber"]
