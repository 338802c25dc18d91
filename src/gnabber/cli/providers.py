"""Settings and factory functions for CLI.

Centralizes creation of hub settings and connection managers from
environment variables. Hides configuration details from command
implementations.
"""

import os

from pydantic import BaseModel, Field, field_validator

from ..config import DEFAULT_HUB_URL, TRANSPORT_MEMORY, TRANSPORT_WEBSOCKET
from ..hub.manager import ConnectionManager
from ..hub.memory import InMemoryHub

_TRUE_VALUES = {"1", "true", "yes", "on"}


class HubSettings(BaseModel):
    """Connection settings for one client run."""

    url: str = Field(default=DEFAULT_HUB_URL, description="Hub endpoint URL")
    transport: str = Field(default=TRANSPORT_WEBSOCKET, description="'websocket' or 'memory'")
    access_token: str | None = Field(default=None, description="Bearer token for the hub")
    skip_negotiation: bool = Field(default=False, description="Open the socket without negotiating")
    username: str = Field(default="", description="Username to prefill")
    log_level: str = Field(default="WARNING", description="Log level name")

    @field_validator("transport")
    @classmethod
    def _known_transport(cls, value: str) -> str:
        value = value.lower()
        if value not in (TRANSPORT_WEBSOCKET, TRANSPORT_MEMORY):
            raise ValueError(
                f"Unsupported transport: {value}. "
                f"Supported transports: {TRANSPORT_WEBSOCKET}, {TRANSPORT_MEMORY}"
            )
        return value


def get_settings(**overrides: object) -> HubSettings:
    """Build settings from environment variables, then apply CLI overrides.

    Overrides that are None are ignored so unset CLI options fall back to
    the environment.

    Environment variables:
        GNABBER_HUB_URL: Hub endpoint (default: the public gnabber hub)
        GNABBER_TRANSPORT: websocket or memory (default: websocket)
        GNABBER_ACCESS_TOKEN: Bearer token (optional)
        GNABBER_SKIP_NEGOTIATION: true to connect the socket directly
        GNABBER_USERNAME: Username to prefill (optional)
        GNABBER_LOG_LEVEL: Log level (default: WARNING)
    """
    values: dict[str, object] = {
        "url": os.getenv("GNABBER_HUB_URL", DEFAULT_HUB_URL),
        "transport": os.getenv("GNABBER_TRANSPORT", TRANSPORT_WEBSOCKET),
        "access_token": os.getenv("GNABBER_ACCESS_TOKEN") or None,
        "skip_negotiation": os.getenv("GNABBER_SKIP_NEGOTIATION", "").lower() in _TRUE_VALUES,
        "username": os.getenv("GNABBER_USERNAME", ""),
        "log_level": os.getenv("GNABBER_LOG_LEVEL", "WARNING"),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return HubSettings(**values)


def get_connection_manager(settings: HubSettings, hub: InMemoryHub | None = None) -> ConnectionManager:
    """Create a connection manager for the configured transport.

    Args:
        settings: Hub settings
        hub: Shared in-memory hub (memory transport only)

    Returns:
        Connection manager that has not connected yet
    """
    if settings.transport == TRANSPORT_MEMORY:
        return ConnectionManager(TRANSPORT_MEMORY, hub=hub or InMemoryHub())

    return ConnectionManager(
        TRANSPORT_WEBSOCKET,
        access_token=settings.access_token,
        skip_negotiation=settings.skip_negotiation,
    )
