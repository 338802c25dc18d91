"""Hub connectivity for gnabber.

Module structure (each module hides one design decision):
- base.py: Connection interface and states
- protocol.py: Hub protocol framing
- websocket.py: Websocket transport with negotiation and reconnect
- memory.py: In-process hub for offline use and tests
- factory.py: Transport selection
- manager.py: Chat-level connect / subscribe / send
"""

from .base import HubConnection, HubConnectionState
from .factory import create_hub_connection
from .manager import ConnectionHandle, ConnectionManager
from .memory import InMemoryHub, InMemoryHubConnection
from .websocket import WebSocketHubConnection

__all__ = [
    "ConnectionHandle",
    "ConnectionManager",
    "HubConnection",
    "HubConnectionState",
    "InMemoryHub",
    "InMemoryHubConnection",
    "WebSocketHubConnection",
    "create_hub_connection",
]
