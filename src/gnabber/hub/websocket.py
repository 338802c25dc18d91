"""WebSocket hub connection.

Hidden design decisions:
- Negotiation over HTTP (including the redirect used by hosted hubs)
- SignalR JSON protocol framing and handshake
- Keepalive pings
- Automatic reconnect after an unexpected drop
"""

import asyncio
import contextlib
import logging
from typing import Any

import httpx
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..config import HANDSHAKE_TIMEOUT, KEEPALIVE_INTERVAL, MAX_NEGOTIATE_REDIRECTS, RECONNECT_DELAYS
from ..errors import HubConnectionError, HubProtocolError
from . import protocol
from .base import HubConnection, HubConnectionState
from .protocol import MessageType

logger = logging.getLogger(__name__)


def negotiate_url(url: httpx.URL) -> httpx.URL:
    """Negotiate endpoint for a hub URL, keeping its query (e.g. ``?hub=chat``)."""
    path = url.path.rstrip("/") + "/negotiate"
    return url.copy_with(path=path).copy_set_param("negotiateVersion", "1")


def websocket_url(
    url: httpx.URL,
    connection_id: str | None = None,
    access_token: str | None = None,
) -> str:
    """Turn an http(s) hub URL into the ws(s) URL used for the socket."""
    scheme = {"https": "wss", "http": "ws"}.get(url.scheme, url.scheme)
    ws_url = url.copy_with(scheme=scheme)
    if connection_id:
        ws_url = ws_url.copy_set_param("id", connection_id)
    if access_token:
        ws_url = ws_url.copy_set_param("access_token", access_token)
    return str(ws_url)


def _check_transports(transports: Any) -> None:
    """Require WebSockets among the offered transports, when any are listed."""
    if not transports:
        return
    if not isinstance(transports, list) or not all(isinstance(t, dict) for t in transports):
        raise HubProtocolError("Negotiation returned a malformed availableTransports list")
    if not any(t.get("transport") == "WebSockets" for t in transports):
        raise HubConnectionError("Hub does not offer the WebSockets transport")


class WebSocketHubConnection(HubConnection):
    """Hub connection over a single websocket.

    Once started, a background task reads frames and hands invocations to
    the registered handlers. If the socket drops, the connection retries
    with the configured delays and returns to DISCONNECTED when they are
    exhausted.
    """

    def __init__(
        self,
        url: str,
        access_token: str | None = None,
        skip_negotiation: bool = False,
        reconnect_delays: tuple[float, ...] = RECONNECT_DELAYS,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize a websocket hub connection.

        Args:
            url: Hub URL (http, https, ws or wss)
            access_token: Bearer token for negotiation and the socket
            skip_negotiation: Connect the socket directly to ``url``
            reconnect_delays: Seconds to wait before each reconnect attempt
            keepalive_interval: Seconds between keepalive pings
            handshake_timeout: Seconds allowed for negotiation, socket opening and handshake
            http_transport: Custom httpx transport for negotiation
        """
        super().__init__(url)
        self._access_token = access_token
        self._skip_negotiation = skip_negotiation
        self._reconnect_delays = tuple(reconnect_delays)
        self._keepalive_interval = keepalive_interval
        self._handshake_timeout = handshake_timeout
        self._http_transport = http_transport
        self._ws: ClientConnection | None = None
        self._receive_task: asyncio.Task | None = None
        self._keepalive_task: asyncio.Task | None = None
        self._stopping = False
        self._allow_reconnect = True

    async def start(self) -> None:
        if self._state != HubConnectionState.DISCONNECTED:
            return

        self._stopping = False
        self._allow_reconnect = True
        self._state = HubConnectionState.CONNECTING
        try:
            self._ws, pending = await self._open()
        except HubConnectionError:
            self._state = HubConnectionState.DISCONNECTED
            raise

        self._state = HubConnectionState.CONNECTED
        logger.info("Connected to hub at %s", self._url)
        self._receive_task = asyncio.create_task(self._receive_loop(pending))
        self._keepalive_task = asyncio.create_task(self._keepalive_loop())

    async def send(self, method: str, *arguments: Any) -> None:
        ws = self._ws
        if self._state != HubConnectionState.CONNECTED or ws is None:
            raise HubConnectionError(f"Cannot invoke {method!r}: connection is {self._state.value}")
        try:
            await ws.send(protocol.encode_invocation(method, arguments))
        except ConnectionClosed as e:
            raise HubConnectionError(f"Connection closed while invoking {method!r}") from e

    async def stop(self) -> None:
        self._stopping = True
        if self._ws is not None:
            await self._ws.close()

        for task in (self._receive_task, self._keepalive_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        self._receive_task = None
        self._keepalive_task = None
        self._ws = None
        if self._state != HubConnectionState.DISCONNECTED:
            self._state = HubConnectionState.DISCONNECTED
            logger.info("Disconnected from hub at %s", self._url)

    async def _open(self) -> tuple[ClientConnection, list[dict[str, Any]]]:
        """Negotiate, open the socket and complete the hub handshake."""
        try:
            if self._skip_negotiation:
                ws_url = websocket_url(httpx.URL(self._url), access_token=self._access_token)
            else:
                ws_url = await self._negotiate()

            ws = await connect(ws_url, open_timeout=self._handshake_timeout)
            try:
                await ws.send(protocol.handshake_request())
                raw = await asyncio.wait_for(ws.recv(), timeout=self._handshake_timeout)
                pending = protocol.parse_handshake_response(raw)
            except BaseException:
                await ws.close()
                raise
        except HubConnectionError:
            raise
        except (httpx.HTTPError, OSError, WebSocketException, asyncio.TimeoutError) as e:
            raise HubConnectionError(f"Failed to connect to hub at {self._url}: {e}") from e

        return ws, pending

    async def _negotiate(self) -> str:
        """Run the negotiate exchange and return the socket URL."""
        url = httpx.URL(self._url)
        token = self._access_token

        async with httpx.AsyncClient(
            transport=self._http_transport,
            timeout=self._handshake_timeout,
        ) as client:
            for _ in range(MAX_NEGOTIATE_REDIRECTS + 1):
                headers = {"Authorization": f"Bearer {token}"} if token else {}
                response = await client.post(negotiate_url(url), headers=headers)
                response.raise_for_status()

                try:
                    data = response.json()
                except ValueError as e:
                    raise HubProtocolError(f"Negotiation returned invalid JSON: {e}") from e
                if not isinstance(data, dict):
                    raise HubProtocolError("Negotiation returned a non-object response")
                if data.get("error"):
                    raise HubProtocolError(f"Negotiation failed: {data['error']}")

                # Hosted hubs answer with the service URL and a token to use there
                if data.get("url"):
                    redirect = data["url"]
                    token = data.get("accessToken", token)
                    if not isinstance(redirect, str) or not (token is None or isinstance(token, str)):
                        raise HubProtocolError("Negotiation redirect has a malformed url or access token")
                    try:
                        url = httpx.URL(redirect)
                    except httpx.InvalidURL as e:
                        raise HubProtocolError(f"Negotiation redirect to invalid URL: {e}") from e
                    logger.debug("Negotiation redirected to %s", url)
                    continue

                _check_transports(data.get("availableTransports"))

                version = data.get("negotiateVersion", 0)
                if not isinstance(version, int) or isinstance(version, bool):
                    raise HubProtocolError(f"Negotiation returned a malformed negotiateVersion: {version!r}")
                connection_id = data.get("connectionToken" if version >= 1 else "connectionId")
                if not connection_id or not isinstance(connection_id, str):
                    raise HubProtocolError("Negotiation response has no connection id")

                return websocket_url(url, connection_id=connection_id, access_token=token)

        raise HubConnectionError(f"Negotiation exceeded {MAX_NEGOTIATE_REDIRECTS} redirects")

    async def _receive_loop(self, pending: list[dict[str, Any]]) -> None:
        try:
            keep_reading = self._handle_messages(pending)
            while True:
                ws = self._ws
                if ws is None:
                    break
                try:
                    if keep_reading:
                        async for raw in ws:
                            if not self._handle_messages(protocol.parse_messages(raw)):
                                break
                    await ws.close()
                except ConnectionClosed as e:
                    logger.warning("Connection to %s lost: %s", self._url, e)
                except HubProtocolError as e:
                    logger.error("Closing connection after protocol error: %s", e)
                    await ws.close()

                if self._stopping or not self._allow_reconnect:
                    break
                keep_reading, reconnected = await self._reconnect()
                if not reconnected:
                    break
        finally:
            if not self._stopping:
                self._state = HubConnectionState.DISCONNECTED
                if self._keepalive_task is not None:
                    self._keepalive_task.cancel()

    async def _reconnect(self) -> tuple[bool, bool]:
        """Retry the connection; returns (keep_reading, reconnected)."""
        self._state = HubConnectionState.RECONNECTING
        for attempt, delay in enumerate(self._reconnect_delays, 1):
            await asyncio.sleep(delay)
            if self._stopping:
                return False, False
            try:
                self._ws, pending = await self._open()
            except HubConnectionError as e:
                logger.warning("Reconnect attempt %d to %s failed: %s", attempt, self._url, e)
                continue

            self._state = HubConnectionState.CONNECTED
            logger.info("Reconnected to hub at %s", self._url)
            return self._handle_messages(pending), True

        logger.error(
            "Giving up on %s after %d reconnect attempts",
            self._url, len(self._reconnect_delays)
        )
        return False, False

    def _handle_messages(self, messages: list[dict[str, Any]]) -> bool:
        """Process hub messages; returns False once the hub has closed the connection."""
        for message in messages:
            kind = message["type"]
            if kind == MessageType.INVOCATION:
                target = message.get("target")
                arguments = message.get("arguments") or []
                if not isinstance(target, str) or not isinstance(arguments, list):
                    logger.warning("Ignoring malformed invocation: %r", message)
                    continue
                self._dispatch_event(target, arguments)
            elif kind == MessageType.CLOSE:
                self._allow_reconnect = bool(message.get("allowReconnect", False))
                if message.get("error"):
                    logger.error("Hub closed the connection: %s", message["error"])
                else:
                    logger.info("Hub closed the connection")
                return False
            elif kind != MessageType.PING:
                logger.debug("Ignoring hub message of type %s", kind)
        return True

    async def _keepalive_loop(self) -> None:
        while True:
            await asyncio.sleep(self._keepalive_interval)
            ws = self._ws
            if self._state != HubConnectionState.CONNECTED or ws is None:
                continue
            try:
                await ws.send(protocol.encode_ping())
            except ConnectionClosed:
                logger.debug("Keepalive ping skipped, connection closed")
