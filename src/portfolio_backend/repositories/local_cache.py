"""In-process implementation of CacheStore.

Used for the whole process lifetime when Redis is not configured or not
reachable at startup, and by RedisCacheRepository as its per-call fallback.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from portfolio_backend.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class LocalCacheRepository:
    """Process-local key-value map with time-based expiry.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Expiry is enforced twice:
    - lazily: ``get`` treats an entry older than its TTL as a miss and deletes it
    - eagerly: ``set`` schedules a purge on the event loop at TTL expiry, so
      memory stays bounded even for keys that are never read again

    Shared state is only touched from the event loop thread, so no lock is
    needed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the local cache.

        Args:
            clock: Monotonic time source in seconds (injectable for tests).
        """
        self._clock = clock
        self._entries: dict[str, CacheEntryEntity] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def mode(self) -> str:
        return "memory"

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._remove(key)
            return None
        return entry.value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._cancel_timer(key)
        entry = CacheEntryEntity(key=key, value=value, stored_at=self._clock(), ttl=ttl)
        self._entries[key] = entry
        self._schedule_purge(entry)

    async def delete(self, key: str) -> None:
        self._remove(key)

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _schedule_purge(self, entry: CacheEntryEntity) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: lazy expiry on read still applies.
            return
        self._timers[entry.key] = loop.call_later(entry.ttl, self._purge, entry)

    def _purge(self, entry: CacheEntryEntity) -> None:
        # Only drop the exact entry the timer was scheduled for.
        if self._entries.get(entry.key) is entry:
            del self._entries[entry.key]
            logger.debug("Purged expired cache key %s", entry.key)
        self._timers.pop(entry.key, None)

    def _remove(self, key: str) -> None:
        self._entries.pop(key, None)
        self._cancel_timer(key)

    def _cancel_timer(self, key: str) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()
