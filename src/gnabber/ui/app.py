"""Main Textual TUI application.

The view half of the program: renders ``ClientState`` and turns user
input into chat messages. It never changes state itself.
"""

import asyncio

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Button, ContentSwitcher, Footer, Header, Input

from ..chat.messages import ErrorDismissed, LoggingIn, Login, MessageChanged, SendMessage, UsernameChanged
from ..chat.state import ClientState, Page, Status
from ..hub.manager import ConnectionManager
from ..runtime.program import Program
from .styles import APP_CSS
from .widgets import ChatView, LoginView, MessageList, StatusBar, synced_input_value


class ChatApp(App):
    """Textual TUI for the chat client."""

    CSS = APP_CSS
    TITLE = "Gnabber"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "dismiss_error", "Dismiss Error"),
    ]

    def __init__(self, program: Program) -> None:
        super().__init__()
        self._program = program
        self._login_pending = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield StatusBar(id="status")
        with ContentSwitcher(initial="login", id="pages"):
            yield LoginView(id="login")
            yield ChatView(id="chat")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self._program.subscribe(self.render_state)
        self.run_worker(self._program.run(), name="program", exit_on_error=True)
        self.query_one("#username-input", Input).focus()

    def on_unmount(self) -> None:
        """Stop the program loop; the connection is closed by ``run_chat_app``."""
        self._program.stop()

    def render_state(self, state: ClientState) -> None:
        """Bring every widget in line with ``state``."""
        pages = self.query_one("#pages", ContentSwitcher)
        if state.page == Page.LOGIN:
            pages.current = "login"
        elif state.page == Page.CHAT:
            if pages.current != "chat":
                pages.current = "chat"
                self.query_one("#message-input", Input).focus()

        if state.page != Page.LOGIN or state.status == Status.ERROR:
            self._login_pending = False
        self.query_one("#status", StatusBar).show_state(state, self._login_pending)
        self.query_one("#login-btn", Button).disabled = self._login_pending

        self._sync_input("#username-input", state.username)
        self._sync_input("#message-input", state.draft_message)
        self.query_one("#send-btn", Button).disabled = not state.can_send
        self.query_one("#message-list", MessageList).show_messages(state.messages, state.username)

    def _sync_input(self, selector: str, value: str) -> None:
        widget = self.query_one(selector, Input)
        new_value = synced_input_value(widget.value, value, widget.has_focus)
        if new_value is not None:
            widget.value = new_value

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "username-input":
            self._program.dispatch(UsernameChanged(username=event.value))
        elif event.input.id == "message-input":
            self._program.dispatch(MessageChanged(text=event.value))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "username-input":
            self._login()
        elif event.input.id == "message-input":
            self._send()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login-btn":
            self._login()
        elif event.button.id == "send-btn":
            self._send()

    def _login(self) -> None:
        if self._login_pending:
            return
        self._login_pending = True
        self.query_one("#login-btn", Button).disabled = True
        self._program.dispatch(LoggingIn())
        self._program.dispatch(Login())

    def _send(self) -> None:
        if not self._program.state.can_send:
            return
        self._program.dispatch(SendMessage())

    def action_dismiss_error(self) -> None:
        """Clear the error shown in the status bar."""
        if self._program.state.status == Status.ERROR:
            self._program.dispatch(ErrorDismissed())


async def run_chat_app(program: Program, manager: ConnectionManager | None = None) -> None:
    """Run the Textual TUI.

    Args:
        program: Program driving the chat state machine
        manager: Connection manager to close on exit
    """
    app = ChatApp(program)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        if manager is not None:
            await manager.close()
