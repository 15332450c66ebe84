"""Handler layer for HTTP and WebSocket endpoints.

This layer contains the request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP/WS) -> (Business) -> (Data Access)
"""

from .chat_handler import ChatHandler
from .contact_handler import ContactHandler
from .realtime_handler import RealtimeHandler
from .system_handler import SystemHandler

__all__ = [
    "ChatHandler",
    "ContactHandler",
    "RealtimeHandler",
    "SystemHandler",
]
