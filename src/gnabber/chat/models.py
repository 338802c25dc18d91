"""Chat message model and its wire encoding.

The hub exchanges chat messages as JSON text with the keys ``username``,
``message`` and ``timestamp``. Peers written against .NET serializers
emit PascalCase keys, which are accepted on input.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, AwareDatetime, BaseModel, ConfigDict, Field, ValidationError

from ..errors import DecodeError


class ChatMessage(BaseModel):
    """A single chat message as exchanged through the hub."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(
        validation_alias=AliasChoices("username", "Username"),
        description="Display name of the sender",
    )
    message: str = Field(
        validation_alias=AliasChoices("message", "Message"),
        description="Message text",
    )
    timestamp: AwareDatetime = Field(
        validation_alias=AliasChoices("timestamp", "Timestamp"),
        description="Time the sender composed the message, with UTC offset",
    )

    @classmethod
    def compose(cls, username: str, message: str, now: datetime | None = None) -> "ChatMessage":
        """Build an outbound message stamped with the local time and offset."""
        timestamp = now if now is not None else datetime.now().astimezone()
        return cls(username=username, message=message, timestamp=timestamp)

    def to_wire(self) -> str:
        """Encode as the JSON text sent to the hub."""
        return self.model_dump_json()

    @classmethod
    def from_wire(cls, payload: Any) -> "ChatMessage":
        """Decode a hub payload.

        Args:
            payload: JSON text (str or bytes), or an already parsed object

        Returns:
            The decoded message

        Raises:
            DecodeError: If the payload is not a valid chat message
        """
        try:
            if isinstance(payload, (str, bytes, bytearray)):
                return cls.model_validate_json(payload)
            if isinstance(payload, dict):
                return cls.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Invalid chat message payload: {_first_error(e)}", payload) from e

        raise DecodeError(
            f"Invalid chat message payload: expected JSON text or object, got {type(payload).__name__}",
            payload,
        )


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
    return f"{location}: {first.get('msg', 'invalid')}"
