"""offlinelink - Offline-first queue for GraphQL mutations."""

from offlinelink.client.api import GraphQLClient, Link
from offlinelink.client.link import OfflineLink
from offlinelink.client.status import SyncStatusStore
from offlinelink.client.storage import FileStorage, MemoryStorage, SqliteStorage, Storage
from offlinelink.client.transport import HTTPTransport
from offlinelink.core.config import OfflineLinkConfig, ServerConfig
from offlinelink.core.types import (
    ConfigurationError,
    ExecutionError,
    ExecutionResult,
    Operation,
    ServerError,
    SyncReport,
    SyncStatus,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ExecutionError",
    "ExecutionResult",
    "FileStorage",
    "GraphQLClient",
    "HTTPTransport",
    "Link",
    "MemoryStorage",
    "OfflineLink",
    "OfflineLinkConfig",
    "Operation",
    "ServerConfig",
    "ServerError",
    "SqliteStorage",
    "Storage",
    "SyncReport",
    "SyncStatus",
    "SyncStatusStore",
    "TransportError",
]
