"""Pytest configuration and shared fixtures."""
import os
from datetime import datetime, timedelta, timezone

import pytest

from gnabber.chat import ChatMessage
from gnabber.hub import ConnectionHandle, InMemoryHub, InMemoryHubConnection


@pytest.fixture(scope="session")
def hub_url():
    """Return the live hub URL from environment, if any."""
    return os.getenv("GNABBER_HUB_URL")


@pytest.fixture
def fixed_time():
    """Return a fixed timestamp with a non-UTC offset."""
    return datetime(2024, 3, 14, 15, 9, 26, 535000, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def bob_message(fixed_time):
    """Return a sample inbound chat message."""
    return ChatMessage(username="bob", message="yo", timestamp=fixed_time)


@pytest.fixture
def hub():
    """Return a fresh in-memory hub."""
    return InMemoryHub()


@pytest.fixture
def handle(hub):
    """Return a handle over an unstarted in-memory connection.

    The reducer never looks inside a handle, so state machine tests can
    use it without starting anything.
    """
    return ConnectionHandle(InMemoryHubConnection("memory://test", hub=hub), "memory://test")
