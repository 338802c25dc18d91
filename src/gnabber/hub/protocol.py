"""SignalR JSON hub protocol framing.

Every message is a JSON object terminated by the ASCII record separator
(0x1E); one websocket frame may carry several records. The connection
opens with a handshake record in each direction.
"""

import json
from enum import IntEnum
from typing import Any

from ..errors import HubProtocolError

RECORD_SEPARATOR = "\x1e"
PROTOCOL_NAME = "json"
PROTOCOL_VERSION = 1


class MessageType(IntEnum):
    """Hub message types."""

    INVOCATION = 1
    STREAM_ITEM = 2
    COMPLETION = 3
    STREAM_INVOCATION = 4
    CANCEL_INVOCATION = 5
    PING = 6
    CLOSE = 7


def encode_record(payload: dict[str, Any]) -> str:
    """Serialize one record, separator included."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + RECORD_SEPARATOR


def handshake_request() -> str:
    return encode_record({"protocol": PROTOCOL_NAME, "version": PROTOCOL_VERSION})


def encode_invocation(target: str, arguments: list[Any] | tuple[Any, ...]) -> str:
    """Encode a non-blocking invocation (no invocation id, no completion expected)."""
    return encode_record({
        "type": int(MessageType.INVOCATION),
        "target": target,
        "arguments": list(arguments),
    })


def encode_ping() -> str:
    return encode_record({"type": int(MessageType.PING)})


def _split_records(raw: str | bytes) -> list[str]:
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HubProtocolError(f"Malformed hub message: invalid UTF-8 ({e})") from e
    else:
        text = raw
    if text and not text.endswith(RECORD_SEPARATOR):
        raise HubProtocolError("Incomplete hub message: missing record separator")
    return [record for record in text.split(RECORD_SEPARATOR) if record]


def _load_record(record: str) -> dict[str, Any]:
    try:
        data = json.loads(record)
    except json.JSONDecodeError as e:
        raise HubProtocolError(f"Malformed hub message: {e}") from e
    if not isinstance(data, dict):
        raise HubProtocolError(f"Malformed hub message: expected object, got {type(data).__name__}")
    return data


def parse_messages(raw: str | bytes) -> list[dict[str, Any]]:
    """Split a frame into hub messages.

    Raises:
        HubProtocolError: If a record is not a JSON object with an integer type
    """
    messages = []
    for record in _split_records(raw):
        data = _load_record(record)
        if not isinstance(data.get("type"), int):
            raise HubProtocolError("Malformed hub message: missing message type")
        messages.append(data)
    return messages


def parse_handshake_response(raw: str | bytes) -> list[dict[str, Any]]:
    """Validate the handshake response.

    The hub may pack regular messages into the same frame as the
    handshake response; those are returned for normal processing.

    Raises:
        HubProtocolError: If the hub rejected the handshake
    """
    records = _split_records(raw)
    if not records:
        raise HubProtocolError("Empty handshake response")

    response = _load_record(records[0])
    error = response.get("error")
    if error:
        raise HubProtocolError(f"Hub rejected handshake: {error}")

    remaining = "".join(record + RECORD_SEPARATOR for record in records[1:])
    return parse_messages(remaining)
