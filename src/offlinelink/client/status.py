"""Sync status read model and publisher.

This module provides:
- SyncStatusStore: Shared read model holding the latest SyncStatus
- StatusPublisher: Writes queue depth and in-flight state into the store

Architecture:
    MutationQueue / SyncEngine ──► StatusPublisher ──► SyncStatusStore ──► observers (UI, CLI)

Only the latest snapshot is kept. A failing store or observer never
propagates into the queue: the write queue and its status are decoupled.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from offlinelink.core.types import SyncStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[SyncStatus], None]


class SyncStatusStore:
    """Read model observed by consumers of the sync status.

    Consumers read it or subscribe to it; only StatusPublisher writes it.

    Usage:
        store = SyncStatusStore()
        unsubscribe = store.subscribe(lambda s: print(s.mutations, s.inflight))
        ...
        unsubscribe()
    """

    def __init__(self) -> None:
        self._status = SyncStatus()
        self._callbacks: list[StatusCallback] = []

    def read(self) -> SyncStatus:
        """Get the latest snapshot."""
        return self._status

    def write(self, status: SyncStatus) -> None:
        """Overwrite the snapshot and notify subscribers."""
        self._status = status
        for callback in list(self._callbacks):
            try:
                callback(status)
            except Exception:
                logger.exception("Sync status subscriber %r failed", callback)

    def subscribe(self, callback: StatusCallback) -> Callable[[], None]:
        """Register a callback invoked with every new snapshot.

        Returns:
            Function removing the subscription.
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe


class StatusPublisher:
    """Publishes queue depth and in-flight state to a SyncStatusStore."""

    def __init__(self, store: SyncStatusStore | None = None) -> None:
        self._store = store if store is not None else SyncStatusStore()
        self._mutations = 0
        self._inflight = False

    @property
    def store(self) -> SyncStatusStore:
        return self._store

    @property
    def inflight(self) -> bool:
        """Transient flag set while a sync cycle runs."""
        return self._inflight

    def publish(self, mutations_pending: int, inflight: bool) -> None:
        """Overwrite the read model with the given values.

        Errors raised by the store are logged and never reach the caller.
        """
        self._mutations = mutations_pending
        self._inflight = inflight
        try:
            self._store.write(SyncStatus(mutations=mutations_pending, inflight=inflight))
        except Exception:
            logger.exception("Failed to publish sync status")

    def update_pending(self, mutations_pending: int) -> None:
        """Publish a new queue depth, keeping the in-flight flag."""
        self.publish(mutations_pending, self._inflight)

    def set_inflight(self, inflight: bool) -> None:
        """Publish a new in-flight flag, keeping the queue depth."""
        self.publish(self._mutations, inflight)
