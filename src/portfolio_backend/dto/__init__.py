"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ChatRequest, ContactRequest
from .responses import (
    AnalyticsSummaryResponse,
    ChatHistoryResponse,
    ChatResponse,
    ContactMessageItem,
    ContactMessageListResponse,
    DailyVisitItem,
    HealthCheckResponse,
    MessageResponse,
    PageViewItem,
    ServicesStatus,
    TurnItem,
)

__all__ = [
    "ChatRequest",
    "ContactRequest",
    "AnalyticsSummaryResponse",
    "ChatHistoryResponse",
    "ChatResponse",
    "ContactMessageItem",
    "ContactMessageListResponse",
    "DailyVisitItem",
    "HealthCheckResponse",
    "MessageResponse",
    "PageViewItem",
    "ServicesStatus",
    "TurnItem",
]
