from typing import Any

from ..config import TRANSPORT_MEMORY, TRANSPORT_WEBSOCKET
from .base import HubConnection


def create_hub_connection(transport: str, url: str, **config: Any) -> HubConnection:
    """Create a hub connection.

    This factory function hides the instantiation logic for different transports.

    Args:
        transport: Transport type ('websocket' or 'memory')
        url: Hub endpoint URL
        **config: Transport-specific configuration
            For websocket:
                - access_token: str | None
                - skip_negotiation: bool (default: False)
                - reconnect_delays: tuple[float, ...] (default: 0, 2, 10, 30)
                - keepalive_interval: float (default: 15.0)
                - handshake_timeout: float (default: 15.0)
                - http_transport: httpx.AsyncBaseTransport | None
            For memory:
                - hub: InMemoryHub | None (a private hub when omitted)

    Returns:
        A connection that has not been started yet

    Raises:
        ValueError: If transport type is not supported

    Examples:
        >>> connection = create_hub_connection(
        ...     "websocket",
        ...     url="https://example.azurewebsites.net/api"
        ... )

        >>> connection = create_hub_connection("memory", url="memory://chat", hub=hub)
    """
    transport_lower = transport.lower()

    if transport_lower == TRANSPORT_WEBSOCKET:
        from .websocket import WebSocketHubConnection
        return WebSocketHubConnection(url, **config)

    if transport_lower == TRANSPORT_MEMORY:
        from .memory import InMemoryHubConnection
        return InMemoryHubConnection(url, **config)

    raise ValueError(
        f"Unsupported transport: {transport}. "
        f"Supported transports: '{TRANSPORT_WEBSOCKET}', '{TRANSPORT_MEMORY}'"
    )
