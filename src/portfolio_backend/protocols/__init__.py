"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping implementations chosen once at startup (Redis -> in-memory, SMTP -> log only)
- Unit testing with fake implementations
- Clear separation of concerns

Usage:
    ```python
    from portfolio_backend.protocols import CacheStore

    cache: CacheStore = RedisCacheRepository(client)   # works
    cache: CacheStore = LocalCacheRepository()          # also works
    ```
"""

from .analytics_store import AnalyticsStore
from .cache_store import CacheStore
from .chat_session_store import ChatSessionStore
from .completion_provider import CompletionProvider
from .contact_store import ContactStore
from .job_queue import JobHandler, JobQueue
from .mailer import Mailer

__all__ = [
    "AnalyticsStore",
    "CacheStore",
    "ChatSessionStore",
    "CompletionProvider",
    "ContactStore",
    "JobHandler",
    "JobQueue",
    "Mailer",
]
