"""Custom Textual widgets for the chat view.

Hides widget implementation details:
- Login form layout
- Incremental rendering of the message list
- Status bar styling
"""

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Input, Static

from ..chat.models import ChatMessage
from ..chat.state import ClientState, Status
from .formatting import format_chat_line, format_status


class StatusBar(Static):
    """Single-line connection and error status."""

    def show_state(self, state: ClientState, login_pending: bool = False) -> None:
        self.update(format_status(state, login_pending))
        self.set_class(state.status == Status.ERROR, "-error")
        self.set_class(state.status == Status.BUSY, "-busy")


def synced_input_value(widget_value: str, state_value: str, focused: bool) -> str | None:
    """Value to write into an input so it matches the state, or None to leave it.

    While the user types, state lags behind the widget by the edits still
    queued, so a focused input only takes a state value that was cleared.
    """
    if widget_value == state_value:
        return None
    if not focused or state_value == "":
        return state_value
    return None


class LoginView(Vertical):
    """Username entry and login button."""

    def compose(self) -> ComposeResult:
        yield Static("Welcome to Gnabber", id="login-title")
        yield Input(placeholder="Username", id="username-input")
        yield Button("Log in", id="login-btn", variant="primary")


class MessageList(VerticalScroll):
    """Chat history, newest message at the top.

    History only grows, so only messages not yet shown are mounted.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._shown = 0

    def show_messages(self, messages: tuple[ChatMessage, ...], own_username: str | None = None) -> None:
        new_count = len(messages) - self._shown
        if new_count <= 0:
            return

        # Oldest of the new messages first so the newest ends up on top
        for message in reversed(messages[:new_count]):
            line = Static(format_chat_line(message, own_username), classes="chat-line")
            if self.children:
                self.mount(line, before=0)
            else:
                self.mount(line)
        self._shown = len(messages)
        self.scroll_home(animate=False)


class ChatView(Vertical):
    """Message list plus the compose bar."""

    def compose(self) -> ComposeResult:
        yield MessageList(id="message-list")
        with Horizontal(id="compose-bar"):
            yield Input(placeholder="Message", id="message-input")
            yield Button("Send", id="send-btn", variant="success")
