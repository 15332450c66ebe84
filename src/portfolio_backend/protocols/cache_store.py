"""Key-value cache protocol.

Defines the interface shared by the remote (Redis) cache and the in-process
fallback map. Callers never need to know which one they were given.

Implementations:
- RedisCacheRepository (remote, falls back per call)
- LocalCacheRepository (process-local map with TTL expiry)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache backends.

    None of these methods raise: a backend failure is reported as a miss
    (``get``) or silently served by a fallback store (``set``/``delete``).

    Example:
        ```python
        cache: CacheStore = LocalCacheRepository()
        await cache.set("greeting", "hi", 1)
        assert await cache.get("greeting") == "hi"
        ```
    """

    @property
    def mode(self) -> str:
        """Return the active backend name ("redis" or "memory")."""
        ...

    async def get(self, key: str) -> str | None:
        """Get a value.

        Args:
            key: The cache key

        Returns:
            The stored value, or None on a miss
        """
        ...

    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store a value.

        Args:
            key: The cache key
            value: Serialized payload
            ttl: Time-to-live in seconds
        """
        ...

    async def delete(self, key: str) -> None:
        """Invalidate a key (no-op if missing)."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable.

        Returns:
            True if healthy, False otherwise
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
