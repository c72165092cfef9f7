"""Mutation queue and its sync engine.

Architecture:
    OfflineLink → MutationQueue ← SyncEngine → execute (client chain)

Components:
- **MutationQueue**: Ordered, persisted queue of pending writes
- **SyncEngine**: Replays the queue, sequentially or concurrently
- **Debouncer**: Delays retry cycles until failures have quieted down
"""

from offlinelink.client.sync.engine import ReplayOutcome, SyncEngine
from offlinelink.client.sync.queue import MutationQueue
from offlinelink.client.sync.retry import Debouncer

__all__ = [
    "Debouncer",
    "MutationQueue",
    "ReplayOutcome",
    "SyncEngine",
]
