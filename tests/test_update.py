"""Unit and property-based tests for the chat state machine."""
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gnabber.chat import (
    ChatMessage,
    ClientState,
    Connect,
    ConnectFailed,
    Connected,
    ErrorDismissed,
    LoggedIn,
    LoggingIn,
    Login,
    MessageChanged,
    MessageReceived,
    MessageSent,
    Page,
    SendChat,
    SendFailed,
    SendMessage,
    Status,
    UsernameChanged,
    init,
    update,
)
from gnabber.chat.update import NOT_CONNECTED_ERROR

chat_messages = st.builds(
    ChatMessage,
    username=st.text(max_size=20),
    message=st.text(max_size=50),
    timestamp=st.datetimes(
        min_value=datetime(2000, 1, 1),
        max_value=datetime(2100, 1, 1),
        timezones=st.just(timezone.utc),
    ),
)

# Messages that need no connection handle
plain_msgs = st.one_of(
    st.builds(UsernameChanged, username=st.text(max_size=20)),
    st.builds(MessageChanged, text=st.text(max_size=50)),
    st.just(LoggingIn()),
    st.just(Login()),
    st.builds(ConnectFailed, reason=st.text(max_size=20)),
    st.just(LoggedIn()),
    st.just(SendMessage()),
    st.just(MessageSent()),
    st.builds(SendFailed, reason=st.text(max_size=20)),
    st.builds(MessageReceived, message=chat_messages),
    st.just(ErrorDismissed()),
)

states = st.builds(
    ClientState,
    page=st.sampled_from(Page),
    username=st.text(max_size=20),
    draft_message=st.text(max_size=50),
    status=st.sampled_from(Status),
    messages=st.lists(chat_messages, max_size=5).map(tuple),
    connection=st.none(),
    error=st.none() | st.text(max_size=20),
)


def run(state, *msgs):
    """Apply messages in order; return final state and all effects."""
    effects = []
    for msg in msgs:
        state, new_effects = update(state, msg)
        effects.extend(new_effects)
    return state, effects


class TestInit:
    """Tests for the initial state."""

    def test_initial_state(self):
        """Test that the client starts busy on the login page."""
        state, effects = init()

        assert state.page == Page.LOGIN
        assert state.username == ""
        assert state.draft_message == ""
        assert state.status == Status.BUSY
        assert state.messages == ()
        assert state.connection is None
        assert state.error is None
        assert effects == []


class TestTransitions:
    """Tests for individual transitions."""

    def test_username_changed(self):
        """Test that UsernameChanged only sets the username."""
        state, effects = update(ClientState(), UsernameChanged("alice"))

        assert state == replace(ClientState(), username="alice")
        assert effects == []

    def test_message_changed(self):
        """Test that MessageChanged only sets the draft."""
        state, effects = update(ClientState(), MessageChanged("hi"))

        assert state == replace(ClientState(), draft_message="hi")
        assert effects == []

    def test_logging_in_sets_busy(self):
        """Test that LoggingIn marks the client busy and clears errors."""
        start = ClientState(status=Status.ERROR, error="boom")

        state, effects = update(start, LoggingIn())

        assert state.status == Status.BUSY
        assert state.error is None
        assert effects == []

    def test_login_requests_connect(self):
        """Test that Login without a connection yields a Connect effect."""
        start = ClientState(username="alice")

        state, effects = update(start, Login())

        assert state == start
        assert effects == [Connect()]

    def test_login_when_connected_reuses_connection(self, handle):
        """Test that Login with a connection opens the chat without reconnecting."""
        start = ClientState(connection=handle, status=Status.BUSY)

        state, effects = update(start, Login())

        assert state.page == Page.CHAT
        assert state.status == Status.READY
        assert effects == []

    def test_connected_stores_handle(self, handle):
        """Test that Connected stores the handle and marks the client ready."""
        state, effects = update(ClientState(), Connected(handle))

        assert state.connection is handle
        assert state.status == Status.READY
        assert effects == []

    def test_connect_failed_surfaces_error(self):
        """Test that a failed connect leaves the login page in an error state."""
        state, effects = update(ClientState(), ConnectFailed("unreachable"))

        assert state.page == Page.LOGIN
        assert state.status == Status.ERROR
        assert state.error == "unreachable"
        assert effects == []

    def test_logged_in_shows_chat(self):
        """Test that LoggedIn switches to the chat page."""
        state, effects = update(ClientState(), LoggedIn())

        assert state.page == Page.CHAT
        assert state.status == Status.READY
        assert effects == []

    def test_send_message_when_connected(self, handle):
        """Test that SendMessage issues one SendChat effect with the draft."""
        start = ClientState(username="alice", draft_message="hi", connection=handle, status=Status.READY)

        state, effects = update(start, SendMessage())

        assert state.status == Status.BUSY
        assert effects == [SendChat(handle=handle, username="alice", text="hi")]

    def test_send_message_when_disconnected_is_an_error(self):
        """Test that SendMessage without a connection reports an error."""
        start = ClientState(username="alice", draft_message="hi", status=Status.READY)

        state, effects = update(start, SendMessage())

        assert state.status == Status.ERROR
        assert state.error == NOT_CONNECTED_ERROR
        assert state.draft_message == "hi"
        assert effects == []

    def test_send_failed_keeps_draft(self, handle):
        """Test that a failed send keeps the draft for a retry."""
        start = ClientState(draft_message="hi", connection=handle, status=Status.BUSY)

        state, effects = update(start, SendFailed("socket closed"))

        assert state.status == Status.ERROR
        assert state.error == "socket closed"
        assert state.draft_message == "hi"
        assert state.connection is handle
        assert effects == []

    def test_error_dismissed(self):
        """Test that ErrorDismissed returns to ready."""
        state, effects = update(ClientState(status=Status.ERROR, error="boom"), ErrorDismissed())

        assert state.status == Status.READY
        assert state.error is None
        assert effects == []

    def test_unknown_message_raises(self):
        """Test that non-message values are rejected."""
        with pytest.raises(TypeError, match="Unknown message"):
            update(ClientState(), "SendMessage")  # type: ignore

    def test_connection_is_never_cleared(self, handle):
        """Test that no message removes an established connection."""
        start = ClientState(connection=handle, status=Status.READY)

        state, _ = run(
            start,
            ConnectFailed("x"),
            SendFailed("y"),
            LoggingIn(),
            ErrorDismissed(),
            MessageSent(),
        )

        assert state.connection is handle


class TestProperties:
    """Property tests for the state machine."""

    @given(states, plain_msgs)
    def test_update_is_pure(self, state: ClientState, msg):
        """Property test: the same inputs always give the same outputs."""
        first = update(state, msg)
        second = update(state, msg)

        assert first == second

    @given(states)
    def test_send_without_connection_never_sends(self, state: ClientState):
        """Property test: a disconnected send keeps history and emits no SendChat."""
        new_state, effects = update(state, SendMessage())

        assert new_state.messages == state.messages
        assert not any(isinstance(effect, SendChat) for effect in effects)

    @given(states, chat_messages)
    def test_message_received_prepends(self, state: ClientState, message: ChatMessage):
        """Property test: a received message grows history by one, newest first."""
        new_state, effects = update(state, MessageReceived(message))

        assert len(new_state.messages) == len(state.messages) + 1
        assert new_state.messages[0] == message
        assert new_state.messages[1:] == state.messages
        assert effects == []

    @given(states)
    def test_message_sent_resets_draft(self, state: ClientState):
        """Property test: MessageSent always clears the draft and marks ready."""
        new_state, effects = update(state, MessageSent())

        assert new_state.draft_message == ""
        assert new_state.status == Status.READY
        assert effects == []

    @given(states, st.lists(plain_msgs, max_size=10))
    def test_history_only_grows(self, state: ClientState, msgs):
        """Property test: no sequence of messages removes history entries."""
        new_state, _ = run(state, *msgs)

        received = sum(isinstance(msg, MessageReceived) for msg in msgs)
        assert len(new_state.messages) == len(state.messages) + received
        assert new_state.messages[len(new_state.messages) - len(state.messages):] == state.messages


class TestScenarios:
    """End-to-end sequences through the state machine."""

    def test_alice_logs_in(self, handle):
        """Test the login sequence ends on the chat page with the handle."""
        state, _ = init()

        state, effects = run(state, UsernameChanged("alice"), Connected(handle), LoggedIn())

        assert state.username == "alice"
        assert state.page == Page.CHAT
        assert state.status == Status.READY
        assert state.connection is handle
        assert effects == []

    def test_alice_sends_hi(self, handle):
        """Test composing and sending a message after login."""
        state, _ = run(init()[0], UsernameChanged("alice"), Connected(handle), LoggedIn())

        state, effects = run(state, MessageChanged("hi"), SendMessage(), MessageSent())

        assert state.draft_message == ""
        assert state.status == Status.READY
        sends = [effect for effect in effects if isinstance(effect, SendChat)]
        assert len(sends) == 1
        assert sends[0].text == "hi"
        assert sends[0].username == "alice"
        assert sends[0].handle is handle

    def test_bob_message_received(self):
        """Test receiving a message into empty history."""
        timestamp = datetime(2024, 3, 14, 15, 9, tzinfo=timezone(timedelta(hours=-5)))
        message = ChatMessage(username="bob", message="yo", timestamp=timestamp)

        state, _ = update(init()[0], MessageReceived(message))

        assert state.messages == (ChatMessage(username="bob", message="yo", timestamp=timestamp),)
