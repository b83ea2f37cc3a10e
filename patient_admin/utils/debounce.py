"""Trailing-edge debouncing for coroutine calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from patient_admin.utils.logging import get_logger

logger = get_logger(__name__)


class Debouncer:
    """Collapse bursts of calls into one.

    Each call waits for ``delay`` seconds. If another call arrives in the
    meantime, the earlier one is superseded: only the latest call runs, and
    every caller of the burst receives its result (or its exception).
    """

    def __init__(self, delay: float):
        """Initialize debouncer.

        Args:
            delay: Quiet period in seconds before the latest call runs
        """
        self.delay = delay
        self._generation = 0
        self._burst: asyncio.Future[Any] | None = None

    async def call[R](self, fn: Callable[[], Awaitable[R]]) -> R:
        """Schedule ``fn`` and return the result of the call that ends the burst."""
        self._generation += 1
        generation = self._generation

        if self._burst is None or self._burst.done():
            self._burst = asyncio.get_running_loop().create_future()
        burst = self._burst

        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            # Release the callers waiting on this burst
            if generation == self._generation and not burst.done():
                burst.cancel()
            raise

        if generation != self._generation:
            logger.debug(f"Debounced call {generation} superseded by {self._generation}")
            return await burst

        self._burst = None
        try:
            result = await fn()
        except Exception as e:
            burst.set_exception(e)
            # Mark as retrieved; a burst may have no other waiters
            burst.exception()
            raise
        burst.set_result(result)
        return result
