"""Effects requested by the chat state machine.

Effects only describe work; ``gnabber.runtime.executor`` performs it
and reports the outcome back as messages.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..hub.manager import ConnectionHandle


@dataclass(frozen=True)
class Connect:
    """Connect to the configured hub and subscribe to chat messages."""


@dataclass(frozen=True)
class SendChat:
    """Send ``text`` as ``username``; the timestamp is taken when it runs."""

    handle: "ConnectionHandle"
    username: str
    text: str


Effect = Union[Connect, SendChat]
