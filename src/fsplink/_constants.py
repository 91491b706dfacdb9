"""Internal constants shared across the library."""

DEFAULT_URL = "ws://127.0.0.1:8765"

#: Reserved state token meaning "unknown / not connected".
SENTINEL_STATE = "xx"

DEFAULT_RECONNECT_INTERVAL: float = 2.0
DEFAULT_LIVENESS_TIMEOUT: float = 5.0
DEFAULT_LIVENESS_CHECK_INTERVAL: float = 1.0
DEFAULT_OPEN_TIMEOUT: float = 10.0

# ------------------------------------------------------------------
# Wire discriminators
# ------------------------------------------------------------------

STATUS_UPDATE_TYPES: frozenset[str] = frozenset({"status_update", "fsp_status_update"})
COMMAND_RESPONSE_TYPE = "command_response"

RESTART_COMMAND = "restart"
