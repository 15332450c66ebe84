"""
Tests for the in-memory cache used in fallback mode.
"""

import asyncio

from portfolio_backend.repositories import LocalCacheRepository


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


async def test_set_then_get_before_ttl():
    """A value is readable until its TTL elapses."""
    cache = LocalCacheRepository()
    await cache.set("project:1", '{"title": "Portfolio"}', ttl=60)

    assert await cache.get("project:1") == '{"title": "Portfolio"}'
    assert cache.mode == "memory"


async def test_missing_key_is_none():
    cache = LocalCacheRepository()
    assert await cache.get("nope") is None


async def test_expired_entry_is_miss_and_purged_on_read():
    """Reading an expired key returns None and removes the entry."""
    clock = FakeClock()
    cache = LocalCacheRepository(clock=clock)
    await cache.set("k", "v", ttl=10)

    clock.now += 10
    assert await cache.get("k") is None
    assert "k" not in cache
    assert await cache.get("k") is None


async def test_greeting_expires_after_one_second():
    cache = LocalCacheRepository()
    await cache.set("greeting", "hi", 1)
    assert await cache.get("greeting") == "hi"

    await asyncio.sleep(1.1)

    assert await cache.get("greeting") is None


async def test_entry_purged_without_reads():
    """The scheduled purge removes keys nobody reads again."""
    cache = LocalCacheRepository()
    await cache.set("k", "v", ttl=1)
    assert len(cache) == 1

    await asyncio.sleep(1.1)

    assert len(cache) == 0


async def test_overwrite_survives_old_purge():
    """Re-setting a key replaces the pending purge of the older value."""
    cache = LocalCacheRepository()
    await cache.set("k", "old", ttl=1)
    await cache.set("k", "new", ttl=5)

    await asyncio.sleep(1.1)

    assert await cache.get("k") == "new"
    await cache.close()


async def test_delete_and_close():
    cache = LocalCacheRepository()
    await cache.set("a", "1", ttl=60)
    await cache.set("b", "2", ttl=60)

    await cache.delete("a")
    assert await cache.get("a") is None
    assert await cache.get("b") == "2"

    await cache.close()
    assert len(cache) == 0
    assert await cache.health_check() is True
