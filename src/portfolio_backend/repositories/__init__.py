"""Repository layer for data access.

This layer abstracts external dependencies (Redis, the SQL database, the AI
provider, SMTP) behind protocol-based interfaces. This enables:
- Choosing an implementation once at startup (Redis vs. in-memory)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from portfolio_backend.config import Settings
from portfolio_backend.protocols import CacheStore, JobQueue

from .database import Database
from .http_completion_provider import HttpCompletionProvider
from .local_cache import LocalCacheRepository
from .local_queue import LocalJobQueue
from .mailers import LoggingMailer, SmtpMailer, create_mailer
from .redis_cache import RedisCacheRepository, connect_redis
from .redis_queue import RedisJobQueue
from .sql_analytics_repository import SqlAnalyticsRepository
from .sql_chat_repository import SqlChatSessionRepository
from .sql_contact_repository import SqlContactRepository


async def create_cache_and_queue(settings: Settings) -> tuple[CacheStore, JobQueue]:
    """Probe Redis once and build the matching cache and queue.

    Returns:
        (RedisCacheRepository, RedisJobQueue) when Redis answered at startup,
        otherwise (LocalCacheRepository, LocalJobQueue) for the whole process
    """
    client = await connect_redis(settings)
    if client is None:
        return LocalCacheRepository(), LocalJobQueue()
    return (
        RedisCacheRepository(client),
        RedisJobQueue(client, prefix=settings.queue_prefix),
    )


__all__ = [
    "Database",
    "HttpCompletionProvider",
    "LocalCacheRepository",
    "LocalJobQueue",
    "LoggingMailer",
    "RedisCacheRepository",
    "RedisJobQueue",
    "SmtpMailer",
    "SqlAnalyticsRepository",
    "SqlChatSessionRepository",
    "SqlContactRepository",
    "connect_redis",
    "create_cache_and_queue",
    "create_mailer",
]
