"""In-process hub and connection.

Routes invocations between connections attached to the same
``InMemoryHub``; nothing leaves the process. Suitable for offline use
and testing.
"""

import logging
from typing import Any

from ..config import RECEIVE_EVENT, SEND_METHOD
from ..errors import HubConnectionError
from .base import HubConnection, HubConnectionState

logger = logging.getLogger(__name__)


class InMemoryHub:
    """A hub that rebroadcasts invocations to every attached connection.

    ``routes`` maps an invoked method to the event broadcast in response;
    the default turns ``SendMessage`` into a ``NewMessage`` broadcast,
    which is what the chat hub does.
    """

    def __init__(
        self,
        routes: dict[str, str] | None = None,
        accept_connections: bool = True,
    ):
        self._routes = dict(routes) if routes is not None else {SEND_METHOD: RECEIVE_EVENT}
        self._connections: list["InMemoryHubConnection"] = []
        self.accept_connections = accept_connections
        self.invocations: list[tuple[str, tuple[Any, ...]]] = []

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def attach(self, connection: "InMemoryHubConnection") -> None:
        if not self.accept_connections:
            raise HubConnectionError(f"Hub at {connection.url} refused the connection")
        if connection not in self._connections:
            self._connections.append(connection)

    def detach(self, connection: "InMemoryHubConnection") -> None:
        if connection in self._connections:
            self._connections.remove(connection)

    async def invoke(self, method: str, arguments: tuple[Any, ...]) -> None:
        """Record an invocation and broadcast the routed event, if any."""
        self.invocations.append((method, arguments))
        event_name = self._routes.get(method)
        if event_name is None:
            logger.debug("No route for hub method %r", method)
            return
        self.broadcast(event_name, *arguments)

    def broadcast(self, event_name: str, *arguments: Any) -> None:
        """Deliver an event to every attached connection."""
        for connection in list(self._connections):
            connection._dispatch_event(event_name, list(arguments))


class InMemoryHubConnection(HubConnection):
    """Connection to an ``InMemoryHub``.

    Without an explicit hub, each connection gets a private hub and only
    hears its own broadcasts.
    """

    def __init__(self, url: str = "memory://local", hub: InMemoryHub | None = None):
        super().__init__(url)
        self._hub = hub if hub is not None else InMemoryHub()

    @property
    def hub(self) -> InMemoryHub:
        return self._hub

    async def start(self) -> None:
        if self._state == HubConnectionState.CONNECTED:
            return
        self._state = HubConnectionState.CONNECTING
        try:
            self._hub.attach(self)
        except HubConnectionError:
            self._state = HubConnectionState.DISCONNECTED
            raise
        self._state = HubConnectionState.CONNECTED
        logger.info("Connected to in-memory hub at %s", self._url)

    async def send(self, method: str, *arguments: Any) -> None:
        if self._state != HubConnectionState.CONNECTED:
            raise HubConnectionError(f"Cannot invoke {method!r}: connection is {self._state.value}")
        await self._hub.invoke(method, arguments)

    async def stop(self) -> None:
        self._hub.detach(self)
        self._state = HubConnectionState.DISCONNECTED
