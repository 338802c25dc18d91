"""Client configuration constants.

Centralizes hub method names, timing values and defaults so the
transport and runtime modules do not carry magic values.
"""

# Hub endpoint used when nothing else is configured
DEFAULT_HUB_URL = "https://signalr-gnabber-function.azurewebsites.net/api"

# Hub method invoked for outbound chat messages
SEND_METHOD = "SendMessage"

# Hub event carrying inbound chat messages
RECEIVE_EVENT = "NewMessage"

# Transport selection
TRANSPORT_WEBSOCKET = "websocket"
TRANSPORT_MEMORY = "memory"

# Automatic reconnect delays in seconds (same schedule as the ASP.NET client)
RECONNECT_DELAYS = (0.0, 2.0, 10.0, 30.0)

# Seconds between keepalive pings sent to the hub
KEEPALIVE_INTERVAL = 15.0

# Seconds allowed for the websocket opening and hub handshake
HANDSHAKE_TIMEOUT = 15.0

# Negotiate redirects followed before giving up
MAX_NEGOTIATE_REDIRECTS = 5

# Chat display configuration
TIMESTAMP_FORMAT = "%H:%M"
