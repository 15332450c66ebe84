"""Domain entities for internal representation.

These are plain dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.

Entities should have:
- No JSON serialization logic beyond primitive conversion
- No Pydantic validation
- No external dependencies
"""

from .analytics_event import AnalyticsEventEntity
from .cache_entry import CacheEntryEntity
from .chat_session import ChatSessionEntity, TurnEntity, TurnRole
from .contact_message import ContactMessageEntity, EmailJob

__all__ = [
    "AnalyticsEventEntity",
    "CacheEntryEntity",
    "ChatSessionEntity",
    "ContactMessageEntity",
    "EmailJob",
    "TurnEntity",
    "TurnRole",
]
