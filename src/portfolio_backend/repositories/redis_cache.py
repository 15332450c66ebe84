"""Redis implementation of CacheStore.

The remote cache is probed once at startup (``connect_redis``). If it answers,
every call goes to Redis and falls back to a local map for that single call
when Redis errors. Reads prefer a local copy left by such a degraded write.
If it does not answer, the application runs on
LocalCacheRepository for the rest of the process lifetime.
"""

import asyncio
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from portfolio_backend.config import Settings
from portfolio_backend.repositories.local_cache import LocalCacheRepository

logger = logging.getLogger(__name__)

# Errors that mean "this call failed", not "the program is wrong".
REMOTE_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff delay before retry number ``attempt`` (0-based)."""
    return min(base_delay * (2**attempt), max_delay)


async def connect_redis(settings: Settings) -> aioredis.Redis | None:
    """Connect to Redis with bounded retries.

    Makes one attempt plus ``settings.redis_max_retries`` retries, sleeping
    with exponential backoff (capped at ``redis_retry_max_delay``) between
    them. There is no background reconnection after this returns None.

    Args:
        settings: Application settings

    Returns:
        A connected client, or None when Redis is not configured or unreachable
    """
    if not settings.redis_url:
        logger.warning("REDIS_URL not set, cache and queue run in in-memory fallback mode")
        return None

    attempts = settings.redis_max_retries + 1
    for attempt in range(attempts):
        client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.redis_connect_timeout,
            socket_timeout=settings.redis_connect_timeout,
        )
        logger.info("Connecting to Redis (attempt %d/%d)", attempt + 1, attempts)
        try:
            await client.ping()
        except REMOTE_ERRORS as e:
            await _close_quietly(client)
            if attempt + 1 >= attempts:
                logger.error(
                    "Redis unreachable after %d attempts (%s), using in-memory fallback mode",
                    attempts,
                    e,
                )
                return None
            delay = backoff_delay(
                attempt, settings.redis_retry_base_delay, settings.redis_retry_max_delay
            )
            logger.warning("Redis connection failed: %s; reconnecting in %.2fs", e, delay)
            await asyncio.sleep(delay)
            continue

        logger.info("Connected to Redis")
        return client

    return None


async def _close_quietly(client: aioredis.Redis) -> None:
    try:
        await client.aclose()
    except REMOTE_ERRORS as e:
        logger.debug("Ignoring error while closing Redis client: %s", e)


class RedisCacheRepository:
    """Redis-backed cache with per-call local fallback.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    A failing call is retried against the local fallback map for that one
    operation and logged; the Redis connection is kept for the next call.
    After ``close()`` every call is served locally.
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        fallback: LocalCacheRepository | None = None,
        key_prefix: str = "",
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: A connected async Redis client (see ``connect_redis``).
            fallback: Local store used when a Redis call fails.
            key_prefix: Optional namespace prepended to every key.
        """
        self._client = redis_client
        self._fallback = fallback or LocalCacheRepository()
        self._prefix = key_prefix
        self._closed = False

    @property
    def mode(self) -> str:
        return "memory" if self._closed else "redis"

    @property
    def fallback(self) -> LocalCacheRepository:
        """Get the local fallback store (for testing)."""
        return self._fallback

    @property
    def client(self) -> aioredis.Redis:
        """Get the Redis client."""
        return self._client

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> str | None:
        # A local copy only exists after a degraded write, so it is newer
        # than whatever Redis still holds for the key.
        local = await self._fallback.get(key)
        if local is not None or self._closed:
            return local
        try:
            return await self._client.get(self._key(key))
        except REMOTE_ERRORS as e:
            logger.warning("Redis GET %s failed (%s), degraded to local cache", key, e)
            return None

    async def set(self, key: str, value: str, ttl: int) -> None:
        if self._closed:
            await self._fallback.set(key, value, ttl)
            return
        try:
            await self._client.set(self._key(key), value, ex=ttl)
        except REMOTE_ERRORS as e:
            logger.warning("Redis SET %s failed (%s), degraded to local cache", key, e)
            await self._fallback.set(key, value, ttl)
            return
        # Drop any stale copy left by an earlier degraded write.
        await self._fallback.delete(key)

    async def delete(self, key: str) -> None:
        await self._fallback.delete(key)
        if self._closed:
            return
        try:
            await self._client.delete(self._key(key))
        except REMOTE_ERRORS as e:
            logger.warning("Redis DEL %s failed (%s)", key, e)

    async def health_check(self) -> bool:
        if self._closed:
            return False
        try:
            return bool(await self._client.ping())
        except REMOTE_ERRORS:
            return False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await _close_quietly(self._client)
        await self._fallback.close()
        logger.info("Redis cache connection closed")
