"""Chat state machine for gnabber.

Module structure (each module hides one design decision):
- models.py: Chat message value and wire encoding
- state.py: Client state and its enums
- messages.py: Messages the state machine accepts
- effects.py: Effects the state machine requests
- update.py: The pure transition function
"""

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
from .models import ChatMessage
from .state import ClientState, Page, Status
from .update import init, update

__all__ = [
    "ChatMessage",
    "ClientState",
    "Connect",
    "ConnectFailed",
    "Connected",
    "Effect",
    "ErrorDismissed",
    "LoggedIn",
    "LoggingIn",
    "Login",
    "MessageChanged",
    "MessageReceived",
    "MessageSent",
    "Msg",
    "Page",
    "SendChat",
    "SendFailed",
    "SendMessage",
    "Status",
    "UsernameChanged",
    "init",
    "update",
]
