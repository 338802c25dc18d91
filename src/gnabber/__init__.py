"""
Gnabber: a real-time chat client for SignalR-style message hubs.

The client is a model-view-update program. A pure state machine
(``gnabber.chat``) describes every change and effect. A runtime
(``gnabber.runtime``) serializes messages and runs the effects against
the hub (``gnabber.hub``).
"""

__version__ = "0.1.0"

from .chat import ChatMessage, ClientState, Page, Status, init, update
from .errors import DecodeError, HubConnectionError, HubError, HubProtocolError, SendError
from .hub import ConnectionHandle, ConnectionManager
from .runtime import EffectExecutor, Program

__all__ = [
    "ChatMessage",
    "ClientState",
    "ConnectionHandle",
    "ConnectionManager",
    "DecodeError",
    "EffectExecutor",
    "HubConnectionError",
    "HubError",
    "HubProtocolError",
    "Page",
    "Program",
    "SendError",
    "Status",
    "init",
    "update",
]
