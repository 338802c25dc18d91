"""Terminal UI module for gnabber.

Provides a Textual-based view over the chat state machine.

Module structure (each module hides one design decision):
- formatting.py: How messages and status read as text
- widgets.py: Custom widgets (login form, message list, status bar)
- styles.py: CSS styling (layout decisions)
- app.py: Application orchestration (user input to messages)
"""

from .app import ChatApp, run_chat_app
from .formatting import format_chat_line, format_status
from .widgets import ChatView, LoginView, MessageList, StatusBar

__all__ = [
    "ChatApp",
    "ChatView",
    "LoginView",
    "MessageList",
    "StatusBar",
    "format_chat_line",
    "format_status",
    "run_chat_app",
]
