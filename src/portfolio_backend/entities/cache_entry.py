"""Cache entry domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheEntryEntity:
    """A value held by the in-memory cache.

    Attributes:
        key: The cache key
        value: Opaque serialized payload
        stored_at: Clock reading (seconds) when the entry was written
        ttl: Time-to-live in seconds
    """

    key: str
    value: str
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has outlived its TTL at ``now``."""
        return now - self.stored_at >= self.ttl
