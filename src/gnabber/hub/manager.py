"""Connection manager: the chat client's single view of the hub.

Owns the one hub connection of a running client and speaks in chat
messages rather than raw hub arguments. Inbound payloads are decoded
here; outbound messages are encoded here.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ..chat.models import ChatMessage
from ..config import SEND_METHOD, TRANSPORT_WEBSOCKET
from ..errors import DecodeError, HubConnectionError, SendError
from .base import HubConnection, HubConnectionState
from .factory import create_hub_connection

logger = logging.getLogger(__name__)

MessageHandler = Callable[[ChatMessage], None]


class ConnectionHandle:
    """Opaque reference to an established hub connection.

    Handles compare by identity; the state machine only checks whether
    it holds one.
    """

    __slots__ = ("_connection", "_endpoint_url")

    def __init__(self, connection: HubConnection, endpoint_url: str):
        self._connection = connection
        self._endpoint_url = endpoint_url

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def is_open(self) -> bool:
        """Whether the underlying connection is usable or recovering."""
        return self._connection.state in (
            HubConnectionState.CONNECTED,
            HubConnectionState.RECONNECTING,
        )

    def __repr__(self) -> str:
        return f"ConnectionHandle({self._endpoint_url!r}, {self._connection.state.value})"


class ConnectionManager:
    """Creates, exposes and closes the client's hub connection.

    Example:
        manager = ConnectionManager("websocket")
        handle = await manager.connect("https://example.azurewebsites.net/api")
        manager.subscribe(handle, "NewMessage", print)
        await manager.send(handle, ChatMessage.compose("alice", "hi"))
    """

    def __init__(
        self,
        transport: str = TRANSPORT_WEBSOCKET,
        send_method: str = SEND_METHOD,
        **transport_config: Any,
    ):
        """
        Initialize the manager.

        Args:
            transport: Transport passed to ``create_hub_connection``
            send_method: Hub method invoked for outbound messages
            **transport_config: Transport-specific configuration
        """
        self._transport = transport
        self._send_method = send_method
        self._transport_config = transport_config
        self._handle: ConnectionHandle | None = None
        self._connect_lock = asyncio.Lock()

    @property
    def handle(self) -> ConnectionHandle | None:
        return self._handle

    async def connect(self, endpoint_url: str) -> ConnectionHandle:
        """Open the hub connection.

        A manager owns at most one connection; while it is open, further
        calls return the same handle. Concurrent calls wait for the first
        one rather than opening a second connection.

        Raises:
            HubConnectionError: If the connection or handshake fails
        """
        async with self._connect_lock:
            if self._handle is not None and self._handle.is_open:
                return self._handle

            connection = create_hub_connection(self._transport, url=endpoint_url, **self._transport_config)
            try:
                await connection.start()
            except HubConnectionError as e:
                logger.error("Could not connect to %s: %s", endpoint_url, e)
                raise

            if self._handle is not None:
                await self._handle._connection.stop()
            self._handle = ConnectionHandle(connection, endpoint_url)
            return self._handle

    def subscribe(self, handle: ConnectionHandle, event_name: str, handler: MessageHandler) -> None:
        """Call ``handler`` with the decoded message of every ``event_name`` event.

        Payloads that do not decode are logged and dropped.
        """
        def on_event(*arguments: Any) -> None:
            if not arguments:
                logger.warning("Dropping %s event without payload", event_name)
                return
            try:
                message = ChatMessage.from_wire(arguments[0])
            except DecodeError as e:
                logger.warning("Dropping malformed %s payload: %s", event_name, e)
                return
            handler(message)

        handle._connection.on(event_name, on_event)

    async def send(self, handle: ConnectionHandle | None, message: ChatMessage) -> None:
        """Hand ``message`` to the transport as the argument of the send method.

        Raises:
            SendError: If the handle is missing or closed, or the transport fails
        """
        if handle is None or not isinstance(handle, ConnectionHandle):
            raise SendError("No hub connection to send on")
        if not handle.is_open:
            raise SendError(f"Hub connection to {handle.endpoint_url} is closed")

        try:
            await handle._connection.send(self._send_method, message.to_wire())
        except HubConnectionError as e:
            raise SendError(f"Failed to send message: {e}") from e

    async def close(self) -> None:
        """Stop the managed connection, if any."""
        if self._handle is None:
            return
        await self._handle._connection.stop()
        self._handle = None
