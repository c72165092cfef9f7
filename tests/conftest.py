"""Shared fixtures for offlinelink tests."""

from __future__ import annotations

import pytest

from offlinelink.client.storage import MemoryStorage
from tests.helpers import FakeServer


@pytest.fixture
def storage() -> MemoryStorage:
    """Create an empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def server() -> FakeServer:
    """Create a reachable fake server."""
    return FakeServer()
