"""Internal constants shared across the library."""

DEFAULT_DEVICE_HOST = "192.168.4.1"

WS_PATH = "/ws"
STATUS_PATH = "/api/status"
SEND_LOCATION_PATH = "/api/send_location"

#: The only event-channel event that triggers the acquire-and-deliver pipeline.
BUTTON_PRESSED_EVENT = "buttonPressed"

DEFAULT_RECONNECT_DELAY: float = 3.0
DEFAULT_PROBE_TIMEOUT: float = 5.0
DEFAULT_DELIVERY_TIMEOUT: float = 10.0
DEFAULT_WS_CONNECT_TIMEOUT: float = 10.0

# ------------------------------------------------------------------
# Location request defaults (seconds)
# ------------------------------------------------------------------

DEFAULT_FIX_TIMEOUT: float = 15.0
DEFAULT_FIX_MAX_AGE: float = 10.0
