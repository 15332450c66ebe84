"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Every process-wide singleton is built once in ``build_container``
    - The container is stored in app.state during lifespan
    - Dependency functions retrieve handlers from request.app.state
    - Shutdown runs in reverse dependency order
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from portfolio_backend.config import Settings
from portfolio_backend.handlers import ChatHandler, ContactHandler, RealtimeHandler, SystemHandler
from portfolio_backend.protocols import CacheStore, CompletionProvider, JobQueue, Mailer
from portfolio_backend.repositories import (
    Database,
    HttpCompletionProvider,
    SqlAnalyticsRepository,
    SqlChatSessionRepository,
    SqlContactRepository,
    create_cache_and_queue,
    create_mailer,
)
from portfolio_backend.services import AnalyticsSink, ChatService, ContactService, RoomManager

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Process-wide singletons shared by every request and socket."""

    settings: Settings
    database: Database
    cache: CacheStore
    queue: JobQueue
    provider: CompletionProvider
    mailer: Mailer
    chat_service: ChatService
    contact_service: ContactService
    analytics: AnalyticsSink
    rooms: RoomManager
    chat_handler: ChatHandler
    contact_handler: ContactHandler
    system_handler: SystemHandler
    realtime_handler: RealtimeHandler

    async def start(self) -> None:
        await self.queue.start()
        await self.analytics.start()

    async def close(self) -> None:
        """Shut down in reverse order: analytics, queue, provider, cache, database."""
        await self.analytics.stop()
        await self.queue.stop()
        await self.provider.close()
        await self.cache.close()
        await self.database.dispose()


async def build_container(
    settings: Settings,
    provider: CompletionProvider | None = None,
    mailer: Mailer | None = None,
) -> AppContainer:
    """Create and wire every layer.

    Args:
        settings: Application settings
        provider: Completion provider override (defaults to the HTTP provider)
        mailer: Mailer override (defaults to SMTP or logging, per settings)

    Returns:
        A container whose background workers are not yet started
    """
    database = Database.create(settings)
    await database.create_tables()

    cache, queue = await create_cache_and_queue(settings)
    provider = provider or HttpCompletionProvider.create(settings)
    mailer = mailer or create_mailer(settings)
    if not settings.ai_api_url:
        logger.warning("AI_API_URL not set, chat will answer with fallback replies")

    chat_service = ChatService(
        repository=SqlChatSessionRepository(database),
        provider=provider,
        cache=cache,
        max_turns=settings.chat_max_turns,
        history_ttl=settings.chat_history_cache_ttl,
    )
    contact_service = ContactService(
        repository=SqlContactRepository(database),
        queue=queue,
        mailer=mailer,
        owner_email=settings.email_user,
        owner_name=settings.email_sender_name,
    )
    contact_service.register_jobs()
    analytics = AnalyticsSink(
        SqlAnalyticsRepository(database),
        max_queue_size=settings.analytics_queue_size,
    )
    rooms = RoomManager()

    debug = settings.is_development
    return AppContainer(
        settings=settings,
        database=database,
        cache=cache,
        queue=queue,
        provider=provider,
        mailer=mailer,
        chat_service=chat_service,
        contact_service=contact_service,
        analytics=analytics,
        rooms=rooms,
        chat_handler=ChatHandler(chat_service, timeout=settings.chat_request_timeout, debug=debug),
        contact_handler=ContactHandler(
            contact_service, debug=debug, admin_token=settings.admin_token
        ),
        system_handler=SystemHandler(
            database, cache, queue, analytics, admin_token=settings.admin_token
        ),
        realtime_handler=RealtimeHandler(chat_service, rooms, timeout=settings.chat_socket_timeout),
    )


def make_lifespan(
    settings: Settings,
    provider: CompletionProvider | None = None,
    mailer: Mailer | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for an app using ``settings``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container = await build_container(settings, provider=provider, mailer=mailer)
        await container.start()
        app.state.container = container
        logger.info(
            "Portfolio backend started (cache=%s, queue=%s, environment=%s)",
            container.cache.mode,
            container.queue.mode,
            settings.environment,
        )

        yield

        await container.close()
        del app.state.container
        logger.info("Portfolio backend shut down")

    return lifespan


def get_container(request: Request) -> AppContainer:
    """Dependency injection for the AppContainer from app.state.

    Raises:
        RuntimeError: If the container is not initialized
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("AppContainer not initialized. Check lifespan setup.")
    return container


def get_chat_handler(request: Request) -> ChatHandler:
    return get_container(request).chat_handler


def get_contact_handler(request: Request) -> ContactHandler:
    return get_container(request).contact_handler


def get_system_handler(request: Request) -> SystemHandler:
    return get_container(request).system_handler


# Type aliases for cleaner dependency injection
ChatHandlerDep = Annotated[ChatHandler, Depends(get_chat_handler)]
ContactHandlerDep = Annotated[ContactHandler, Depends(get_contact_handler)]
SystemHandlerDep = Annotated[SystemHandler, Depends(get_system_handler)]
