"""Debounced retry scheduling.

This module provides:
- Debouncer: Coalesces repeated triggers into one delayed coroutine call

Every trigger() restarts the delay, so the callback only runs once the
system has been quiet for the full interval since the last trigger.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Owned timer handle running a coroutine function after a quiet period.

    Usage:
        debouncer = Debouncer(30.0, engine.sync)
        debouncer.trigger()  # schedules sync in 30s
        debouncer.trigger()  # resets the timer, still one sync
        debouncer.cancel()   # nothing will run
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], Awaitable[Any]],
    ) -> None:
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds before the callback runs.
            callback: Coroutine function to run.
        """
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a call is scheduled but has not started."""
        return self._handle is not None

    def trigger(self) -> None:
        """Schedule the callback, resetting any timer already running.

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self._delay, self._fire)
        logger.debug("Retry scheduled in %.1fs", self._delay)

    def cancel(self) -> None:
        """Cancel the scheduled call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._callback())
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Scheduled retry failed: %s", error, exc_info=error)

    async def aclose(self) -> None:
        """Cancel the timer and stop any callback still running."""
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
        for task in list(self._tasks):
            with contextlib.suppress(asyncio.CancelledError):
                await task
