"""Tests for the persistent mutation queue."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from offlinelink.client.status import StatusPublisher, SyncStatusStore
from offlinelink.client.storage import MemoryStorage, SqliteStorage
from offlinelink.client.sync.queue import MutationQueue
from offlinelink.core.config import STORAGE_KEY
from offlinelink.core.types import Operation
from tests.helpers import FlakyStorage, make_operation


class TestMutationQueue:
    """Tests for MutationQueue class."""

    def test_add_returns_id_and_persists(self, storage: MemoryStorage) -> None:
        """Adding should store the attempt before returning."""
        queue = MutationQueue(storage)
        attempt_id = queue.add(make_operation(optimistic={"ok": True}))

        assert attempt_id in queue
        assert len(queue) == 1
        stored = json.loads(storage.get(STORAGE_KEY) or "[]")
        assert stored[0][0] == attempt_id
        assert stored[0][1]["optimistic_response"] == {"ok": True}

    def test_insertion_order_preserved(self, storage: MemoryStorage) -> None:
        """Iteration should follow the order writes were added."""
        queue = MutationQueue(storage)
        ids = [queue.add(make_operation(name=f"W{i}")) for i in range(5)]

        assert queue.ids() == ids
        assert [a.operation.operation_name for a in queue] == [f"W{i}" for i in range(5)]

    def test_remove(self, storage: MemoryStorage) -> None:
        """Removing should drop the attempt and persist."""
        queue = MutationQueue(storage)
        first = queue.add(make_operation(name="W1"))
        second = queue.add(make_operation(name="W2"))

        removed = queue.remove(first)

        assert removed is not None
        assert removed.id == first
        assert queue.ids() == [second]
        stored = json.loads(storage.get(STORAGE_KEY) or "[]")
        assert [pair[0] for pair in stored] == [second]

    def test_remove_missing_is_noop(self, storage: MemoryStorage) -> None:
        """Removing an unknown id should not raise."""
        queue = MutationQueue(storage)
        attempt_id = queue.add(make_operation())
        queue.remove(attempt_id)

        assert queue.remove(attempt_id) is None
        assert queue.remove("never-existed") is None
        assert len(queue) == 0

    def test_clear(self, storage: MemoryStorage) -> None:
        """Clearing should remove everything."""
        queue = MutationQueue(storage)
        queue.add(make_operation())
        queue.add(make_operation())

        assert queue.clear() == 2
        assert not queue
        assert storage.get(STORAGE_KEY) == "[]"

    def test_iteration_is_snapshot(self, storage: MemoryStorage) -> None:
        """Removing while iterating should be safe."""
        queue = MutationQueue(storage)
        for i in range(3):
            queue.add(make_operation(name=f"W{i}"))

        for attempt in queue:
            queue.remove(attempt.id)

        assert len(queue) == 0

    def test_custom_storage_key(self, storage: MemoryStorage) -> None:
        """Should persist under the configured key."""
        queue = MutationQueue(storage, storage_key="other")
        queue.add(make_operation())

        assert storage.get("other") is not None
        assert storage.get(STORAGE_KEY) is None


class TestMutationQueueHydrate:
    """Tests for loading the queue from storage."""

    def test_round_trip(self, storage: MemoryStorage) -> None:
        """A reloaded queue should have the same ids, payloads and order."""
        queue = MutationQueue(storage)
        for i in range(4):
            queue.add(make_operation(name=f"W{i}", text=f"item {i}", optimistic={"n": i}))

        reloaded = MutationQueue(storage)
        assert reloaded.hydrate() == 4

        assert reloaded.ids() == queue.ids()
        assert list(reloaded) == list(queue)

    def test_missing_document_is_empty(self, storage: MemoryStorage) -> None:
        """First run should start with an empty queue."""
        queue = MutationQueue(storage)
        assert queue.hydrate() == 0
        assert len(queue) == 0

    @pytest.mark.parametrize(
        "stored",
        [
            "not json",
            '{"a": 1}',
            '[["only-id"]]',
            '[["id", {"variables": {}}]]',
        ],
    )
    def test_corrupt_document_is_empty(self, storage: MemoryStorage, stored: str) -> None:
        """Unreadable documents should be treated like a first run."""
        storage.set(STORAGE_KEY, stored)
        queue = MutationQueue(storage)

        assert queue.hydrate() == 0
        assert len(queue) == 0

    def test_storage_read_error_is_empty(self) -> None:
        """A failing provider read should be treated like a first run."""
        storage = MagicMock()
        storage.get.side_effect = OSError("disk gone")
        queue = MutationQueue(storage)

        assert queue.hydrate() == 0

    def test_sqlite_round_trip(self, tmp_path: Path) -> None:
        """The queue should survive a process restart with SqliteStorage."""
        db_path = tmp_path / "queue.db"
        with SqliteStorage(db_path) as storage:
            queue = MutationQueue(storage)
            first = queue.add(make_operation(name="W1"))
            second = queue.add(make_operation(name="W2"))

        with SqliteStorage(db_path) as storage:
            reloaded = MutationQueue(storage)
            reloaded.hydrate()
            assert reloaded.ids() == [first, second]


class TestMutationQueuePersistence:
    """Tests for persistence failures and status publishing."""

    def test_write_failure_propagates(self) -> None:
        """A failing provider write should reach the caller."""
        storage = MagicMock()
        storage.set.side_effect = OSError("disk full")
        queue = MutationQueue(storage)

        with pytest.raises(OSError, match="disk full"):
            queue.add(make_operation())

    def test_persist_publishes_depth(self, storage: MemoryStorage) -> None:
        """Every add/remove should publish the queue depth."""
        store = SyncStatusStore()
        queue = MutationQueue(storage, publisher=StatusPublisher(store))

        attempt_id = queue.add(make_operation())
        queue.add(make_operation())
        assert store.read().mutations == 2

        queue.remove(attempt_id)
        assert store.read().mutations == 1
        assert store.read().inflight is False

    def test_publisher_failure_does_not_affect_queue(self, storage: MemoryStorage) -> None:
        """A broken read model should not fail queue operations."""
        store = MagicMock()
        store.write.side_effect = RuntimeError("cache broken")
        queue = MutationQueue(storage, publisher=StatusPublisher(store))

        attempt_id = queue.add(make_operation())

        assert attempt_id in queue
        assert storage.get(STORAGE_KEY) is not None

    def test_unserializable_add_leaves_queue_unchanged(self, storage: MemoryStorage) -> None:
        """A write that cannot be encoded should not poison later operations."""
        queue = MutationQueue(storage)
        first = queue.add(make_operation(name="W1"))
        bad = Operation(
            query="mutation Plan($when: Date!) { plan(when: $when) }",
            variables={"when": date(2026, 1, 1)},
            operation_name="Plan",
            optimistic_response={"plan": True},
        )

        with pytest.raises(TypeError):
            queue.add(bad)

        assert queue.ids() == [first]
        second = queue.add(make_operation(name="W2"))
        queue.remove(first)
        stored = json.loads(storage.get(STORAGE_KEY) or "[]")
        assert [pair[0] for pair in stored] == [second]

    def test_failed_write_keeps_memory_and_storage_in_step(self) -> None:
        """add, remove and clear should not change memory when the write fails."""
        storage = FlakyStorage()
        queue = MutationQueue(storage)
        first = queue.add(make_operation(name="W1"))
        stored = storage.get(STORAGE_KEY)

        storage.fail = True
        with pytest.raises(OSError):
            queue.add(make_operation(name="W2"))
        with pytest.raises(OSError):
            queue.remove(first)
        with pytest.raises(OSError):
            queue.clear()

        assert queue.ids() == [first]
        assert storage.get(STORAGE_KEY) == stored

    def test_failed_write_does_not_publish(self) -> None:
        """The published depth should only follow committed changes."""
        storage = FlakyStorage()
        store = SyncStatusStore()
        queue = MutationQueue(storage, publisher=StatusPublisher(store))
        queue.add(make_operation())

        storage.fail = True
        with pytest.raises(OSError):
            queue.add(make_operation())

        assert store.read().mutations == 1
