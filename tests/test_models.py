"""Unit and property-based tests for the chat message model."""
import json
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gnabber.chat import ChatMessage
from gnabber.errors import DecodeError

offsets = st.integers(min_value=-14 * 60, max_value=14 * 60).map(
    lambda minutes: timezone(timedelta(minutes=minutes))
)
aware_datetimes = st.datetimes(
    min_value=datetime(1970, 1, 2),
    max_value=datetime(2100, 1, 1),
    timezones=offsets,
)


class TestChatMessage:
    """Tests for ChatMessage model."""

    def test_create_message(self, fixed_time):
        """Test creating a message with all fields."""
        message = ChatMessage(username="alice", message="hi", timestamp=fixed_time)

        assert message.username == "alice"
        assert message.message == "hi"
        assert message.timestamp == fixed_time

    def test_message_is_immutable(self, bob_message):
        """Test that messages cannot be changed after construction."""
        with pytest.raises(ValueError):
            bob_message.message = "changed"  # type: ignore

    def test_equality_is_field_equality(self, fixed_time):
        """Test that messages with the same fields are equal."""
        first = ChatMessage(username="bob", message="yo", timestamp=fixed_time)
        second = ChatMessage(username="bob", message="yo", timestamp=fixed_time)

        assert first == second
        assert first != ChatMessage(username="bob", message="yo!", timestamp=fixed_time)

    def test_naive_timestamp_rejected(self):
        """Test that timestamps must carry an offset."""
        with pytest.raises(ValueError):
            ChatMessage(username="bob", message="yo", timestamp=datetime(2024, 1, 1, 12, 0))

    def test_compose_uses_given_time(self, fixed_time):
        """Test that compose stamps the message with the supplied time."""
        message = ChatMessage.compose("alice", "hi", now=fixed_time)

        assert message.timestamp == fixed_time

    def test_compose_defaults_to_aware_local_time(self):
        """Test that compose without a time uses an offset-aware now."""
        message = ChatMessage.compose("alice", "hi")

        assert message.timestamp.tzinfo is not None
        assert message.timestamp.utcoffset() is not None


class TestWireEncoding:
    """Tests for the JSON wire format."""

    def test_wire_keys_are_lowercase(self, bob_message):
        """Test that encoded messages use exactly the hub's field names."""
        data = json.loads(bob_message.to_wire())

        assert set(data) == {"username", "message", "timestamp"}
        assert data["username"] == "bob"
        assert data["message"] == "yo"

    def test_timestamp_keeps_offset(self, bob_message, fixed_time):
        """Test that the encoded timestamp is ISO-8601 with its offset."""
        data = json.loads(bob_message.to_wire())

        assert data["timestamp"].startswith("2024-03-14T15:09:26.535")
        assert data["timestamp"].endswith("+02:00")
        assert datetime.fromisoformat(data["timestamp"]) == fixed_time

    def test_decode_lowercase_payload(self, bob_message):
        """Test decoding the canonical wire format."""
        payload = '{"username": "bob", "message": "yo", "timestamp": "2024-03-14T15:09:26.535+02:00"}'

        assert ChatMessage.from_wire(payload) == bob_message

    def test_decode_pascal_case_payload(self, bob_message):
        """Test decoding payloads from .NET peers."""
        payload = '{"Username": "bob", "Message": "yo", "Timestamp": "2024-03-14T15:09:26.535+02:00"}'

        assert ChatMessage.from_wire(payload) == bob_message

    def test_decode_bytes_and_dict(self, bob_message):
        """Test that bytes and already parsed objects are accepted."""
        assert ChatMessage.from_wire(bob_message.to_wire().encode("utf-8")) == bob_message
        assert ChatMessage.from_wire(json.loads(bob_message.to_wire())) == bob_message

    def test_decode_invalid_json_fails(self):
        """Test that malformed JSON raises DecodeError."""
        with pytest.raises(DecodeError):
            ChatMessage.from_wire("{not json")

    def test_decode_missing_field_fails(self):
        """Test that a payload without a message field raises DecodeError."""
        with pytest.raises(DecodeError, match="message"):
            ChatMessage.from_wire('{"username": "bob", "timestamp": "2024-03-14T15:09:26+02:00"}')

    def test_decode_naive_timestamp_fails(self):
        """Test that a timestamp without offset raises DecodeError."""
        with pytest.raises(DecodeError):
            ChatMessage.from_wire('{"username": "bob", "message": "yo", "timestamp": "2024-03-14T15:09:26"}')

    def test_decode_unsupported_type_fails(self):
        """Test that non-text, non-object payloads raise DecodeError."""
        with pytest.raises(DecodeError, match="expected JSON text or object"):
            ChatMessage.from_wire(42)

    def test_decode_error_is_value_error(self):
        """Test that DecodeError can be handled as ValueError."""
        with pytest.raises(ValueError):
            ChatMessage.from_wire("[]")

    @given(username=st.text(), text=st.text(), timestamp=aware_datetimes)
    def test_round_trip_preserves_fields(self, username: str, text: str, timestamp: datetime):
        """Property test: decoding an encoded message yields an equal message."""
        message = ChatMessage(username=username, message=text, timestamp=timestamp)

        decoded = ChatMessage.from_wire(message.to_wire())

        assert decoded == message
        assert decoded.timestamp.utcoffset() == timestamp.utcoffset()
