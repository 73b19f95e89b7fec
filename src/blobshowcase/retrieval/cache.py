"""Per-stage result cache with a freshness window."""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Set

from blobshowcase.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


class StageCache:
    """
    Cache keyed by (stage, input identity).

    Fresh entries are returned as-is. Stale entries are returned immediately
    while a refetch runs in the background; the refetched value replaces the
    entry when it lands. Missing entries are fetched inline.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._refreshing: Dict[Hashable, asyncio.Task] = {}
        self._tasks: Set[asyncio.Task] = set()
        self._generation = 0

    def is_fresh(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and (self._clock() - entry.stored_at) < self.ttl_seconds

    def peek(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        return entry.value if entry else None

    def put(self, key: Hashable, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    async def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[Any]]) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            generation = self._generation
            value = await fetch()
            if generation == self._generation:
                self.put(key, value)
            return value

        refreshing = self._refreshing.get(key)
        if (self._clock() - entry.stored_at) >= self.ttl_seconds and (refreshing is None or refreshing.done()):
            logger.debug(f"Cache entry {key!r} is stale; refreshing in background")
            task = asyncio.create_task(self._refresh(key, fetch, self._generation))
            self._refreshing[key] = task
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return entry.value

    async def _refresh(self, key: Hashable, fetch: Callable[[], Awaitable[Any]], generation: int) -> None:
        try:
            value = await fetch()
        except Exception as e:
            logger.warning(f"Background refresh of {key!r} failed: {e}")
            return
        finally:
            self._refreshing.pop(key, None)
        if generation == self._generation:
            self.put(key, value)

    async def wait_for_refreshes(self) -> None:
        """Wait for every in-flight background refresh to settle."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def invalidate(self, stage: Optional[str] = None) -> None:
        """
        Drop cached entries.

        Args:
            stage: Only drop keys whose first element is this stage name. None drops all.

        Results from fetches already in flight are discarded when they land.
        """
        if stage is None:
            self._entries.clear()
        else:
            for key in [k for k in self._entries if isinstance(k, tuple) and k and k[0] == stage]:
                del self._entries[key]
        self._generation += 1
