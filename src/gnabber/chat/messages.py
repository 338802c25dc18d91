"""Messages accepted by the chat state machine.

Each message is a small immutable value; ``Msg`` is the union of all of
them. UI input, inbound hub events and finished effects all arrive as
one of these.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .models import ChatMessage

if TYPE_CHECKING:
    from ..hub.manager import ConnectionHandle


@dataclass(frozen=True)
class UsernameChanged:
    username: str


@dataclass(frozen=True)
class MessageChanged:
    text: str


@dataclass(frozen=True)
class LoggingIn:
    """The user started logging in."""


@dataclass(frozen=True)
class Login:
    """Request to connect to the hub and enter the chat."""


@dataclass(frozen=True)
class Connected:
    handle: "ConnectionHandle"


@dataclass(frozen=True)
class ConnectFailed:
    reason: str


@dataclass(frozen=True)
class LoggedIn:
    pass


@dataclass(frozen=True)
class SendMessage:
    """Request to send the current draft."""


@dataclass(frozen=True)
class MessageSent:
    pass


@dataclass(frozen=True)
class SendFailed:
    reason: str


@dataclass(frozen=True)
class MessageReceived:
    message: ChatMessage


@dataclass(frozen=True)
class ErrorDismissed:
    pass


Msg = Union[
    UsernameChanged,
    MessageChanged,
    LoggingIn,
    Login,
    Connected,
    ConnectFailed,
    LoggedIn,
    SendMessage,
    MessageSent,
    SendFailed,
    MessageReceived,
    ErrorDismissed,
]
