"""Text formatting for the chat view.

Pure functions so rendering decisions can be tested without a terminal.
"""

from rich.markup import escape

from ..chat.models import ChatMessage
from ..chat.state import ClientState, Page, Status
from ..config import TIMESTAMP_FORMAT


def format_chat_line(message: ChatMessage, own_username: str | None = None) -> str:
    """Render one message as Rich markup.

    Messages from ``own_username`` get a different name colour.
    """
    time_text = message.timestamp.strftime(TIMESTAMP_FORMAT)
    name_style = "bold green" if own_username and message.username == own_username else "bold cyan"
    return (
        f"[dim]{time_text}[/dim] "
        f"[{name_style}]{escape(message.username)}[/] "
        f"{escape(message.message)}"
    )


def format_status(state: ClientState, login_pending: bool = False) -> str:
    """One-line status text for the status bar.

    ``login_pending`` tells a requested login apart from the idle login
    page; both are BUSY without a connection.
    """
    if state.status == Status.ERROR:
        return f"Error: {state.error or 'unknown error'}"
    if state.status == Status.BUSY:
        if state.is_connected:
            return "Sending..."
        if state.page == Page.LOGIN and not login_pending:
            return "Enter a username to log in"
        return "Connecting..."
    if not state.is_connected:
        return "Not connected"
    count = len(state.messages)
    return f"Connected as {state.username or 'anonymous'} | {count} message{'s' if count != 1 else ''}"
