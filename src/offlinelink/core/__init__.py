"""Core module - Shared types and configuration."""

from offlinelink.core.config import (
    DEFAULT_RETRY_INTERVAL,
    STORAGE_KEY,
    OfflineLinkConfig,
    ServerConfig,
    is_terminal_failure,
)
from offlinelink.core.types import (
    ConfigurationError,
    ExecutionError,
    ExecutionResult,
    OfflineLinkError,
    Operation,
    PendingWrite,
    ServerError,
    SyncReport,
    SyncStatus,
    TransportError,
)

__all__ = [
    "DEFAULT_RETRY_INTERVAL",
    "STORAGE_KEY",
    "ConfigurationError",
    "ExecutionError",
    "ExecutionResult",
    "OfflineLinkConfig",
    "OfflineLinkError",
    "Operation",
    "PendingWrite",
    "ServerConfig",
    "ServerError",
    "SyncReport",
    "SyncStatus",
    "TransportError",
    "is_terminal_failure",
]
