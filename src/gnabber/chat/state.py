"""Client state for the chat state machine.

The state is an immutable value; ``update`` returns a new one for every
message it handles.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .models import ChatMessage

if TYPE_CHECKING:
    from ..hub.manager import ConnectionHandle


class Page(str, Enum):
    """Which view the client shows."""

    LOGIN = "login"
    CHAT = "chat"


class Status(str, Enum):
    """Whether the client accepts user actions."""

    READY = "ready"
    BUSY = "busy"
    ERROR = "error"


@dataclass(frozen=True)
class ClientState:
    """Everything the view needs to render the client.

    ``messages`` is ordered newest first and only ever grows.
    """

    page: Page = Page.LOGIN
    username: str = ""
    draft_message: str = ""
    status: Status = Status.BUSY
    messages: tuple[ChatMessage, ...] = ()
    connection: "ConnectionHandle | None" = None
    error: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.connection is not None

    @property
    def can_send(self) -> bool:
        """Whether the view should enable the send action."""
        return self.is_connected and self.status == Status.READY
