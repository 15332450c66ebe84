"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from portfolio_backend.services import ChatService

    chat = ChatService(repository=repo, provider=provider, cache=cache)
    reply = await chat.handle_message("hello", session_id="s1")
    ```
"""

from .analytics_service import AnalyticsSink
from .chat_service import (
    REQUEST_FALLBACK_REPLIES,
    SOCKET_FALLBACK_REPLIES,
    ChatReply,
    ChatService,
    history_key,
    version_key,
)
from .contact_service import EMAIL_JOB, ContactPage, ContactService
from .room_service import DEFAULT_ROOM, RoomManager

__all__ = [
    "AnalyticsSink",
    "ChatReply",
    "ChatService",
    "ContactPage",
    "ContactService",
    "DEFAULT_ROOM",
    "EMAIL_JOB",
    "REQUEST_FALLBACK_REPLIES",
    "RoomManager",
    "SOCKET_FALLBACK_REPLIES",
    "history_key",
    "version_key",
]
