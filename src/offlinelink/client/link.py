"""Offline link intercepting writes that declare an optimistic response.

This module provides:
- OfflineLink: Link that queues writes durably and resolves callers
  immediately with either the server result or the optimistic response

Flow for a write with an optimistic response:
    1. add() to the MutationQueue (persisted before anything is sent)
    2. forward the request down the chain
    3. success -> remove() from the queue, return the server result
    4. failure -> schedule a debounced sync, return the optimistic response

Writes without an optimistic response pass through untouched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from offlinelink.client.status import StatusPublisher, SyncStatusStore
from offlinelink.client.sync.engine import SyncEngine
from offlinelink.client.sync.queue import MutationQueue
from offlinelink.core.config import OfflineLinkConfig
from offlinelink.core.types import (
    ConfigurationError,
    ExecutionResult,
    Operation,
    SyncReport,
    SyncStatus,
)

if TYPE_CHECKING:
    from offlinelink.client.api import GraphQLClient, NextLink

logger = logging.getLogger(__name__)


class OfflineLink:
    """Link deferring failed writes to a persistent retry queue.

    Usage:
        link = OfflineLink(OfflineLinkConfig(storage=SqliteStorage(path), sequential=True))
        client = GraphQLClient(HTTPTransport(server_config), links=[link])
        await link.setup(client)  # hydrate the queue and flush it

        result = await client.mutate(ADD_TODO, {"text": "milk"},
                                     optimistic_response={"addTodo": {...}})
    """

    def __init__(
        self,
        config: OfflineLinkConfig,
        status_store: SyncStatusStore | None = None,
    ) -> None:
        """Initialize the offline link.

        Args:
            config: Storage and retry settings.
            status_store: Read model receiving sync status snapshots.

        Raises:
            ConfigurationError: If no storage was configured.
        """
        if config.storage is None:
            raise ConfigurationError("Storage is required")
        self._config = config
        self._publisher = StatusPublisher(status_store)
        self._queue = MutationQueue(
            config.storage,
            publisher=self._publisher,
            storage_key=config.storage_key,
        )
        self._engine = SyncEngine(
            self._queue,
            execute=None,
            publisher=self._publisher,
            retry_interval=config.retry_interval,
            sequential=config.sequential,
            is_terminal=config.is_terminal,
        )
        self._forwards: set[asyncio.Task[ExecutionResult]] = set()

    @property
    def queue(self) -> MutationQueue:
        return self._queue

    @property
    def engine(self) -> SyncEngine:
        return self._engine

    @property
    def status(self) -> SyncStatus:
        """Latest published sync status."""
        return self._publisher.store.read()

    async def setup(self, client: GraphQLClient) -> SyncReport:
        """Bind the link to a client, load the persisted queue and flush it.

        Replays go through client.execute() without their optimistic
        response, so they traverse the whole chain but bypass this link.
        """
        self._engine.bind(client.execute)
        self._queue.hydrate()
        self._publisher.update_pending(len(self._queue))
        return await self._engine.sync()

    async def sync(self) -> SyncReport:
        """Flush the queue now."""
        return await self._engine.sync()

    async def request(self, operation: Operation, forward: NextLink) -> ExecutionResult:
        """Handle one operation travelling down the chain."""
        if not operation.has_optimistic_response:
            # Without an optimistic response the write is not deferred
            return await forward(operation)

        attempt_id = self._queue.add(operation)

        task = asyncio.ensure_future(self._attempt(attempt_id, operation, forward))
        self._forwards.add(task)
        task.add_done_callback(self._forwards.discard)

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            # Cancelling the caller detaches it; the attempt itself goes on
            task.add_done_callback(self._log_detached_failure)
            raise

    @staticmethod
    def _log_detached_failure(task: asyncio.Task[ExecutionResult]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Deferred mutation failed after its caller left: %s", error)

    async def _attempt(
        self, attempt_id: str, operation: Operation, forward: NextLink
    ) -> ExecutionResult:
        try:
            result = await forward(operation)
        except Exception as e:
            # Try again after the retry interval
            logger.info("Mutation %s failed, deferring: %s", attempt_id[:8], e)
            self._engine.schedule()
            return self._optimistic_result(operation.optimistic_response)

        # Delivered, no need to retry it later
        self._queue.remove(attempt_id)
        return result

    @staticmethod
    def _optimistic_result(data: Any) -> ExecutionResult:
        return ExecutionResult(data=data, errors=[], optimistic=True)

    async def aclose(self) -> None:
        """Cancel scheduled retries and wait for in-flight writes."""
        if self._forwards:
            await asyncio.gather(*self._forwards, return_exceptions=True)
        await self._engine.aclose()
