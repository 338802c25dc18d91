"""Abstract base class for hub connections.

This module hides the design decision of how the client talks to the
hub. Implementations must handle:
- Connection setup (negotiation, handshake)
- Framing of outbound invocations
- Delivery of inbound events to registered handlers
- Reconnecting after a dropped connection

Supports async context manager protocol for proper resource cleanup:
    async with connection:
        await connection.send("SendMessage", payload)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., None]


class HubConnectionState(str, Enum):
    """Lifecycle states of a hub connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class HubConnection(ABC):
    """A duplex connection to a hub.

    Outbound traffic is method invocations; inbound traffic is events
    delivered to handlers registered with ``on``.
    """

    def __init__(self, url: str):
        self._url = url
        self._state = HubConnectionState.DISCONNECTED
        self._handlers: dict[str, list[EventHandler]] = {}

    @property
    def url(self) -> str:
        """Endpoint this connection was created for."""
        return self._url

    @property
    def state(self) -> HubConnectionState:
        """Current connection state."""
        return self._state

    def on(self, event_name: str, handler: EventHandler) -> None:
        """Register a handler called with the arguments of every matching event.

        Handlers run on the event loop that drives the connection.
        """
        self._handlers.setdefault(event_name, []).append(handler)

    def _dispatch_event(self, event_name: str, arguments: list[Any]) -> None:
        handlers = self._handlers.get(event_name)
        if not handlers:
            logger.debug("No handler registered for event %r", event_name)
            return
        for handler in list(handlers):
            try:
                handler(*arguments)
            except Exception:
                # One failing handler must not stop the receive loop
                logger.exception("Handler for event %r failed", event_name)

    @abstractmethod
    async def start(self) -> None:
        """Open the connection and complete the hub handshake.

        Raises:
            HubConnectionError: If the hub cannot be reached or rejects the handshake
        """

    @abstractmethod
    async def send(self, method: str, *arguments: Any) -> None:
        """Invoke a hub method without waiting for a result.

        Returns once the transport has accepted the frame.

        Raises:
            HubConnectionError: If the connection is not open or the transport fails
        """

    @abstractmethod
    async def stop(self) -> None:
        """Close the connection and stop reconnecting."""

    async def __aenter__(self) -> "HubConnection":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()
