"""Effect executor.

Hides how effects reach the hub: every suspension point of the client
lives here, and every outcome is reported back as a message.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from ..chat.effects import Connect, Effect, SendChat
from ..chat.messages import ConnectFailed, Connected, LoggedIn, MessageReceived, MessageSent, Msg, SendFailed
from ..chat.models import ChatMessage
from ..config import RECEIVE_EVENT
from ..errors import HubConnectionError, SendError
from ..hub.manager import ConnectionHandle, ConnectionManager

logger = logging.getLogger(__name__)

Dispatch = Callable[[Msg], None]


def local_now() -> datetime:
    """Current local time with its UTC offset."""
    return datetime.now().astimezone()


class EffectExecutor:
    """Runs effects against a ``ConnectionManager``."""

    def __init__(
        self,
        manager: ConnectionManager,
        endpoint_url: str,
        receive_event: str = RECEIVE_EVENT,
        clock: Callable[[], datetime] = local_now,
    ):
        self._manager = manager
        self._endpoint_url = endpoint_url
        self._receive_event = receive_event
        self._clock = clock
        self._subscribed: ConnectionHandle | None = None

    @property
    def manager(self) -> ConnectionManager:
        return self._manager

    async def execute(self, effect: Effect, dispatch: Dispatch) -> None:
        """Run one effect, dispatching its result messages."""
        if isinstance(effect, Connect):
            await self._connect(dispatch)
        elif isinstance(effect, SendChat):
            await self._send(effect, dispatch)
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

    async def _connect(self, dispatch: Dispatch) -> None:
        try:
            handle = await self._manager.connect(self._endpoint_url)
        except HubConnectionError as e:
            dispatch(ConnectFailed(reason=str(e)))
            return

        # A handle reused by the manager already delivers to this client
        if handle is not self._subscribed:
            self._manager.subscribe(
                handle,
                self._receive_event,
                lambda message: dispatch(MessageReceived(message=message)),
            )
            self._subscribed = handle
        dispatch(Connected(handle=handle))
        dispatch(LoggedIn())

    async def _send(self, effect: SendChat, dispatch: Dispatch) -> None:
        message = ChatMessage.compose(effect.username, effect.text, now=self._clock())
        try:
            await self._manager.send(effect.handle, message)
        except SendError as e:
            logger.warning("Send failed: %s", e)
            dispatch(SendFailed(reason=str(e)))
            return
        dispatch(MessageSent())
