"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
Screen {
    background: $background;
}

#status {
    height: 1;
    padding: 0 1;
    background: $panel;
    color: $text-muted;

    &.-busy {
        color: $warning;
    }

    &.-error {
        color: $error;
        text-style: bold;
    }
}

#pages {
    height: 1fr;
}

LoginView {
    align: center middle;
    height: 100%;

    #login-title {
        width: 40;
        content-align: center middle;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    Input {
        width: 40;
    }

    Button {
        width: 40;
        margin-top: 1;
    }
}

ChatView {
    height: 100%;
}

#message-list {
    height: 1fr;
    border: round $primary 60%;
    padding: 0 1;

    .chat-line {
        margin-bottom: 1;
    }
}

#compose-bar {
    height: auto;

    #message-input {
        width: 1fr;
    }

    #send-btn {
        min-width: 10;
    }
}
"""
