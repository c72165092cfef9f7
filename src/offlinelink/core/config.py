"""Shared configuration classes for offlinelink.

This module defines the configuration of the offline link (queue storage and
retry policy) and of the HTTP transport used to reach the GraphQL server.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from offlinelink.core.types import ConfigurationError

if TYPE_CHECKING:
    from offlinelink.client.storage import Storage

# Storage key holding the serialized queue
STORAGE_KEY = "@offlineLink"

# Seconds of quiet after the last failure before a sync cycle runs
DEFAULT_RETRY_INTERVAL = 30.0


def is_terminal_failure(error: BaseException) -> bool:
    """Default failure classification.

    A failure is terminal when the server was reached and answered with a
    structured response; retrying would not change the outcome. Failures
    without a response (connect errors, timeouts) are retryable.
    """
    return getattr(error, "response", None) is not None


@dataclass
class OfflineLinkConfig:
    """Configuration for OfflineLink.

    Attributes:
        storage: Persistence provider for the mutation queue (required).
        retry_interval: Debounce delay in seconds between a failure and the
            next sync cycle.
        sequential: Replay queued writes in order, stopping at the first
            retryable failure. False replays them all concurrently.
        is_terminal: Predicate deciding whether a replay failure is terminal.
        storage_key: Key the queue is stored under.
    """

    storage: Storage | None
    retry_interval: float = DEFAULT_RETRY_INTERVAL
    sequential: bool = False
    is_terminal: Callable[[BaseException], bool] = is_terminal_failure
    storage_key: str = STORAGE_KEY

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.storage is None:
            raise ConfigurationError(
                "Storage is required, it can be a MemoryStorage, FileStorage, SqliteStorage, etc."
            )
        if self.retry_interval < 0:
            raise ConfigurationError(
                f"retry_interval must be >= 0, got {self.retry_interval}"
            )


@dataclass
class ServerConfig:
    """Configuration for connecting to a GraphQL endpoint.

    Attributes:
        endpoint: GraphQL endpoint URL (e.g., "https://api.example.com/graphql").
        token: Optional bearer token.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    endpoint: str
    token: str | None = None
    timeout: float = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize endpoint URL."""
        self.endpoint = self.endpoint.rstrip("/")

    @property
    def headers(self) -> dict[str, str]:
        """HTTP headers sent with every request."""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers
