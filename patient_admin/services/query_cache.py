"""In-memory query cache with freshness window and prefix invalidation."""

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Any

from patient_admin.utils.logging import get_logger

logger = get_logger(__name__)

QueryKey = tuple[Hashable, ...]


def make_query_key(*parts: Hashable, params: Mapping[str, Any] | None = None) -> QueryKey:
    """Build a cache key from its parts and an optional parameter mapping.

    Parameters set to None are left out, so ``{"name": None}`` and ``{}``
    share an entry.
    """
    if params is None:
        return tuple(parts)
    items = tuple(sorted((name, value) for name, value in params.items() if value is not None))
    return (*parts, items)


@dataclass
class CacheEntry:
    """A stored query result."""

    data: Any
    updated_at: float


class QueryCache:
    """Cache of remote query results keyed by (resource kind, ..., parameters).

    Identical keys inside the freshness window reuse the stored result, and
    concurrent fetches of one key share a single request. Results are stored
    only under the key they were requested for.
    """

    def __init__(self, stale_seconds: float = 30.0, clock: Callable[[], float] = time.monotonic):
        """Initialize query cache.

        Args:
            stale_seconds: Seconds a stored result stays fresh
            clock: Monotonic time source
        """
        self.stale_seconds = stale_seconds
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._in_flight: dict[QueryKey, asyncio.Future[Any]] = {}
        self._invalidated_in_flight: set[asyncio.Future[Any]] = set()

    def get(self, key: QueryKey) -> Any | None:
        """Return the fresh result stored for ``key``, if any."""
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.data

    async def fetch[T](self, key: QueryKey, query_fn: Callable[[], Awaitable[T]]) -> T:
        """Return the cached result for ``key`` or run ``query_fn`` to obtain it."""
        self._cleanup_stale_entries()

        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"Query cache hit: {key}")
            return entry.data

        pending = self._in_flight.get(key)
        if pending is not None:
            logger.debug(f"Joining in-flight query: {key}")
            return await asyncio.shield(pending)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            data = await query_fn()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()
            raise
        finally:
            if self._in_flight.get(key) is future:
                del self._in_flight[key]
            invalidated = future in self._invalidated_in_flight
            self._invalidated_in_flight.discard(future)

        if invalidated:
            logger.debug(f"Discarding result invalidated while in flight: {key}")
        else:
            self._entries[key] = CacheEntry(data=data, updated_at=self._clock())

        future.set_result(data)
        return data

    def invalidate(self, prefix: QueryKey = ()) -> int:
        """Drop every entry whose key starts with ``prefix``.

        In-flight queries under the prefix still answer their callers but are
        not stored, and later fetches of their keys start a new request.

        Returns:
            Number of stored entries removed
        """
        stale_keys = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in stale_keys:
            del self._entries[key]

        for key in [key for key in self._in_flight if key[: len(prefix)] == prefix]:
            self._invalidated_in_flight.add(self._in_flight.pop(key))

        logger.debug(f"Invalidated {len(stale_keys)} cached queries under {prefix}")
        return len(stale_keys)

    def clear(self) -> None:
        """Remove all stored entries."""
        self.invalidate(())

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.updated_at < self.stale_seconds

    def _cleanup_stale_entries(self) -> None:
        """Remove entries past the freshness window."""
        stale_keys = [key for key, entry in self._entries.items() if not self._is_fresh(entry)]
        for key in stale_keys:
            del self._entries[key]
