"""Sync engine replaying queued mutations against the server.

This module provides:
- SyncEngine: Flushes the MutationQueue, sequentially or concurrently

Failure classification:
    success           -> removed from the queue
    terminal failure  -> removed; the server processed and rejected the write
    retryable failure -> kept for the next cycle; the server was never reached

While attempts remain after a cycle, the engine schedules another cycle
through its Debouncer, so retries continue without busy-looping.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING

from offlinelink.client.sync.retry import Debouncer
from offlinelink.core.config import DEFAULT_RETRY_INTERVAL, is_terminal_failure
from offlinelink.core.types import ExecutionResult, Operation, PendingWrite, SyncReport

if TYPE_CHECKING:
    from offlinelink.client.status import StatusPublisher
    from offlinelink.client.sync.queue import MutationQueue

logger = logging.getLogger(__name__)

ExecuteFunc = Callable[[Operation], Awaitable[ExecutionResult]]


class ReplayOutcome(str, Enum):
    """Classified outcome of one replay."""

    SUCCEEDED = "succeeded"
    DISCARDED = "discarded"
    RETAINED = "retained"


class SyncEngine:
    """Replays the mutation queue and reschedules itself while work remains.

    Usage:
        engine = SyncEngine(queue, client.execute, publisher, retry_interval=30.0)
        report = await engine.sync()   # immediate cycle
        engine.schedule()              # debounced cycle
    """

    def __init__(
        self,
        queue: MutationQueue,
        execute: ExecuteFunc | None,
        publisher: StatusPublisher,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        sequential: bool = False,
        is_terminal: Callable[[BaseException], bool] = is_terminal_failure,
    ) -> None:
        """Initialize the sync engine.

        Args:
            queue: Queue to flush.
            execute: Capability sending one operation to the server. May be
                bound later with bind().
            publisher: Status publisher for in-flight updates.
            retry_interval: Debounce delay in seconds before a retry cycle.
            sequential: Replay in order and stop at the first retryable failure.
            is_terminal: Predicate classifying a failure as terminal.
        """
        self._queue = queue
        self._execute = execute
        self._publisher = publisher
        self._sequential = sequential
        self._is_terminal = is_terminal
        self._debouncer = Debouncer(retry_interval, self.sync)

    @property
    def sequential(self) -> bool:
        return self._sequential

    @property
    def scheduled(self) -> bool:
        """True while a debounced cycle is waiting to run."""
        return self._debouncer.pending

    def bind(self, execute: ExecuteFunc) -> None:
        """Set the capability used to replay operations."""
        self._execute = execute

    def schedule(self) -> None:
        """Request a debounced sync cycle."""
        self._debouncer.trigger()

    def cancel(self) -> None:
        """Cancel the pending debounced cycle, if any."""
        self._debouncer.cancel()

    async def aclose(self) -> None:
        await self._debouncer.aclose()

    async def sync(self) -> SyncReport:
        """Try to deliver every queued mutation once.

        Returns:
            Report of the ids delivered, discarded and retained.
        """
        report = SyncReport()
        if not self._queue:
            # Nothing to sync
            report.skipped = True
            return report

        execute = self._execute
        if execute is None:
            raise RuntimeError("SyncEngine has no execute capability; call bind() first")

        self._publisher.set_inflight(True)
        attempts = list(self._queue)
        logger.info(
            "Syncing %d queued mutations (%s)",
            len(attempts),
            "sequential" if self._sequential else "concurrent",
        )

        try:
            if self._sequential:
                await self._replay_sequential(execute, attempts, report)
            else:
                await self._replay_concurrent(execute, attempts, report)
        finally:
            # Remaining mutations are persisted, in-flight cleared
            self._publisher.set_inflight(False)
            self._queue.persist()

        report.retained = self._queue.ids()
        logger.info(
            "Sync finished: %d delivered, %d discarded, %d still queued",
            len(report.succeeded),
            len(report.discarded),
            len(report.retained),
        )

        if self._queue:
            self.schedule()

        return report

    async def _replay_sequential(
        self, execute: ExecuteFunc, attempts: list[PendingWrite], report: SyncReport
    ) -> None:
        for attempt in attempts:
            outcome = await self._replay(execute, attempt)
            self._record(attempt, outcome, report)
            if outcome is ReplayOutcome.RETAINED:
                # Later writes may depend on this one
                break

    async def _replay_concurrent(
        self, execute: ExecuteFunc, attempts: list[PendingWrite], report: SyncReport
    ) -> None:
        # Every replay settles before the cycle ends, even when one raises
        outcomes = await asyncio.gather(
            *(self._replay(execute, attempt) for attempt in attempts),
            return_exceptions=True,
        )
        failure: BaseException | None = None
        for attempt, outcome in zip(attempts, outcomes):
            if isinstance(outcome, BaseException):
                failure = failure or outcome
            else:
                self._record(attempt, outcome, report)
        if failure is not None:
            raise failure

    async def _replay(self, execute: ExecuteFunc, attempt: PendingWrite) -> ReplayOutcome:
        """Send one attempt and remove it on a final outcome."""
        try:
            await execute(attempt.operation.without_optimistic())
        except Exception as e:
            if self._is_terminal(e):
                # The server processed the request, retrying won't help
                logger.warning("Discarding mutation %r rejected by server: %s", attempt, e)
                self._queue.remove(attempt.id)
                return ReplayOutcome.DISCARDED
            logger.debug("Mutation %r will be retried: %s", attempt, e)
            return ReplayOutcome.RETAINED

        self._queue.remove(attempt.id)
        return ReplayOutcome.SUCCEEDED

    @staticmethod
    def _record(attempt: PendingWrite, outcome: ReplayOutcome, report: SyncReport) -> None:
        if outcome is ReplayOutcome.SUCCEEDED:
            report.succeeded.append(attempt.id)
        elif outcome is ReplayOutcome.DISCARDED:
            report.discarded.append(attempt.id)
