"""Persistent mutation queue.

This module provides:
- MutationQueue: Ordered, id-keyed collection of pending write attempts

Ordering:
    Attempts are kept in a dict keyed by id; dict insertion order is the
    order the writes were issued and defines replay order in sequential
    mode. Lookup and removal by id are O(1).

Persistence:
    Every add/remove rewrites the whole queue to the storage provider as a
    JSON list of [id, attempt] pairs under one key, then publishes the new
    depth. A serialization or write failure propagates to the caller and
    the in-memory queue stays as it was before the call.

    hydrate() treats a missing or unreadable document as an empty queue.
    First run and corruption are recovered the same way.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from offlinelink.core.config import STORAGE_KEY
from offlinelink.core.types import Operation, PendingWrite

if TYPE_CHECKING:
    from collections.abc import Iterator

    from offlinelink.client.status import StatusPublisher
    from offlinelink.client.storage import Storage

logger = logging.getLogger(__name__)


class MutationQueue:
    """Ordered queue of writes awaiting confirmed delivery.

    add(), remove() and clear() build the new queue, store it and only then
    adopt it, so memory never holds a state that storage refused.

    Attributes:
        storage: Persistence provider
        storage_key: Key the serialized queue is stored under
    """

    def __init__(
        self,
        storage: Storage,
        publisher: StatusPublisher | None = None,
        storage_key: str = STORAGE_KEY,
    ) -> None:
        """Initialize an empty queue.

        Args:
            storage: Persistence provider
            publisher: Optional status publisher updated on every persist
            storage_key: Key the serialized queue is stored under
        """
        self.storage = storage
        self.storage_key = storage_key
        self._publisher = publisher
        self._attempts: dict[str, PendingWrite] = {}

    def hydrate(self) -> int:
        """Replace the in-memory queue with the persisted one.

        Returns:
            Number of attempts loaded
        """
        self._attempts = self._load()
        if self._attempts:
            logger.info("Loaded %d pending mutations from storage", len(self._attempts))
        return len(self._attempts)

    def _load(self) -> dict[str, PendingWrite]:
        try:
            stored = self.storage.get(self.storage_key)
            if stored is None:
                return {}
            return self.deserialize(stored)
        except Exception as e:
            # Most likely the first run, or a document we can't read
            logger.debug("Starting with an empty mutation queue: %s", e)
            return {}

    def persist(self) -> None:
        """Write the full queue to storage and publish its depth."""
        self._commit(self._attempts)

    def _commit(self, attempts: dict[str, PendingWrite]) -> None:
        """Store attempts, then make them the in-memory queue.

        Serialization or storage errors propagate and leave the queue as it
        was, so memory never holds what storage refused.
        """
        self.storage.set(self.storage_key, self._serialize(attempts))
        self._attempts = attempts
        if self._publisher is not None:
            self._publisher.update_pending(len(attempts))

    def add(self, operation: Operation) -> str:
        """Append a write attempt to the end of the queue.

        Args:
            operation: The write to deliver later

        Returns:
            Id of the new attempt

        Raises:
            TypeError: If the operation cannot be serialized
        """
        attempt = PendingWrite.create(operation)
        attempts = dict(self._attempts)
        attempts[attempt.id] = attempt
        self._commit(attempts)
        logger.debug("Queued mutation: %r (queue size: %d)", attempt, len(self._attempts))
        return attempt.id

    def remove(self, attempt_id: str) -> PendingWrite | None:
        """Remove an attempt by id.

        Removing an id that is not queued is a no-op, so concurrent
        replays can each remove the same attempt safely.

        Returns:
            The removed attempt, or None if not found
        """
        attempts = dict(self._attempts)
        attempt = attempts.pop(attempt_id, None)
        self._commit(attempts)
        if attempt:
            logger.debug("Removed mutation: %r (queue size: %d)", attempt, len(self._attempts))
        return attempt

    def clear(self) -> int:
        """Remove all attempts.

        Returns:
            Number of attempts removed
        """
        count = len(self._attempts)
        self._commit({})
        logger.info("Cleared %d mutations from queue", count)
        return count

    def get(self, attempt_id: str) -> PendingWrite | None:
        return self._attempts.get(attempt_id)

    def ids(self) -> list[str]:
        """Attempt ids in insertion order."""
        return list(self._attempts)

    def serialize(self) -> str:
        """Serialize the queue as an ordered JSON list of [id, attempt] pairs."""
        return self._serialize(self._attempts)

    @staticmethod
    def _serialize(attempts: dict[str, PendingWrite]) -> str:
        return json.dumps(
            [[attempt_id, attempt.to_dict()] for attempt_id, attempt in attempts.items()]
        )

    @staticmethod
    def deserialize(stored: str) -> dict[str, PendingWrite]:
        """Parse a serialized queue, preserving order.

        Raises:
            ValueError: If the document is not a list of [id, attempt] pairs
        """
        pairs: Any = json.loads(stored)
        if not isinstance(pairs, list):
            raise ValueError("Serialized queue must be a list")
        attempts: dict[str, PendingWrite] = {}
        for pair in pairs:
            attempt_id, data = pair
            attempts[str(attempt_id)] = PendingWrite.from_dict(str(attempt_id), data)
        return attempts

    def __len__(self) -> int:
        """Get number of pending attempts."""
        return len(self._attempts)

    def __iter__(self) -> Iterator[PendingWrite]:
        """Iterate over a snapshot of the attempts in insertion order."""
        return iter(list(self._attempts.values()))

    def __contains__(self, attempt_id: object) -> bool:
        return attempt_id in self._attempts

    def __bool__(self) -> bool:
        """Check if queue has attempts."""
        return bool(self._attempts)
