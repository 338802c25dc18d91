"""Error hierarchy for hub communication.

Transport-specific failures (socket errors, HTTP errors, websocket
protocol errors) are wrapped into these types so callers only need to
know about this module.
"""


class HubError(Exception):
    """Base class for hub errors."""


class HubConnectionError(HubError):
    """Connecting to the hub failed (negotiate, handshake or transport)."""


class HubProtocolError(HubConnectionError):
    """The hub sent something that is not valid hub protocol."""


class SendError(HubError):
    """An outbound invocation could not be handed to the transport."""


class DecodeError(HubError, ValueError):
    """An inbound payload is not a valid chat message."""

    def __init__(self, message: str, payload: object = None):
        super().__init__(message)
        self.payload = payload
