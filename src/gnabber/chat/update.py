"""The chat state machine.

``update`` is a pure function: it never touches the network or the
clock. Work that needs either is returned as effects for the runtime
to carry out.
"""

from dataclasses import replace

from .effects import Connect, Effect, SendChat
from .messages import (
    ConnectFailed,
    Connected,
    ErrorDismissed,
    LoggedIn,
    LoggingIn,
    Login,
    MessageChanged,
    MessageReceived,
    MessageSent,
    Msg,
    SendFailed,
    SendMessage,
    UsernameChanged,
)
from .state import ClientState, Page, Status

NOT_CONNECTED_ERROR = "Not connected to the hub"


def init() -> tuple[ClientState, list[Effect]]:
    """Initial state: login page, busy until a connection exists."""
    return ClientState(), []


def update(state: ClientState, msg: Msg) -> tuple[ClientState, list[Effect]]:
    """Apply one message to the state.

    Args:
        state: Current client state
        msg: Message to handle

    Returns:
        The next state and the effects to run, in order

    Raises:
        TypeError: If ``msg`` is not a chat message
    """
    if isinstance(msg, UsernameChanged):
        return replace(state, username=msg.username), []

    if isinstance(msg, MessageChanged):
        return replace(state, draft_message=msg.text), []

    if isinstance(msg, LoggingIn):
        return replace(state, status=Status.BUSY, error=None), []

    if isinstance(msg, Login):
        # One connection per client: logging in again just reopens the chat
        if state.connection is not None:
            return replace(state, page=Page.CHAT, status=Status.READY, error=None), []
        return state, [Connect()]

    if isinstance(msg, Connected):
        return replace(state, connection=msg.handle, status=Status.READY, error=None), []

    if isinstance(msg, ConnectFailed):
        return replace(state, status=Status.ERROR, error=msg.reason), []

    if isinstance(msg, LoggedIn):
        return replace(state, page=Page.CHAT, status=Status.READY), []

    if isinstance(msg, SendMessage):
        if state.connection is None:
            return replace(state, status=Status.ERROR, error=NOT_CONNECTED_ERROR), []
        effect = SendChat(handle=state.connection, username=state.username, text=state.draft_message)
        return replace(state, status=Status.BUSY, error=None), [effect]

    if isinstance(msg, MessageSent):
        return replace(state, draft_message="", status=Status.READY), []

    if isinstance(msg, SendFailed):
        return replace(state, status=Status.ERROR, error=msg.reason), []

    if isinstance(msg, MessageReceived):
        return replace(state, messages=(msg.message,) + state.messages), []

    if isinstance(msg, ErrorDismissed):
        return replace(state, status=Status.READY, error=None), []

    raise TypeError(f"Unknown message: {msg!r}")
