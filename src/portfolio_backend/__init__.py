"""Portfolio Backend - chat, contact form and analytics for a portfolio site.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, JobQueue, ChatSessionStore, ...)
    - repositories: Data access implementations (Redis, in-memory, SQL, HTTP, SMTP)
    - services: Business logic
    - handlers: HTTP and WebSocket endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from portfolio_backend.repositories import LocalCacheRepository

    cache = LocalCacheRepository()
    await cache.set("greeting", "hi", ttl=60)
    ```

For HTTP API:
    ```python
    from portfolio_backend.api.app import create_app
    ```
"""

from portfolio_backend.config import Settings, get_settings
from portfolio_backend.entities import ChatSessionEntity, TurnEntity, TurnRole
from portfolio_backend.exceptions import (
    CompletionError,
    EmptyMessageError,
    PersistenceError,
    PortfolioError,
)
from portfolio_backend.protocols import CacheStore, ChatSessionStore, CompletionProvider, JobQueue
from portfolio_backend.repositories import LocalCacheRepository, RedisCacheRepository
from portfolio_backend.services import ChatReply, ChatService

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "CacheStore",
    "ChatSessionStore",
    "CompletionProvider",
    "JobQueue",
    # Services (business logic)
    "ChatReply",
    "ChatService",
    # Repositories (data access)
    "LocalCacheRepository",
    "RedisCacheRepository",
    # Entities (domain models)
    "ChatSessionEntity",
    "TurnEntity",
    "TurnRole",
    # Errors
    "CompletionError",
    "EmptyMessageError",
    "PersistenceError",
    "PortfolioError",
]
