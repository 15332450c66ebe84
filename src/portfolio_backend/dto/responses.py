"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatResponse(BaseModel):
    """Response DTO for a chat exchange."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="The assistant reply (real or fallback)")
    session_id: str = Field(..., alias="sessionId", description="The resolved session id")


class TurnItem(BaseModel):
    """Single turn in a transcript."""

    role: str = Field(..., description="'user' or 'assistant'")
    content: str = Field(..., description="Message text")
    timestamp: datetime = Field(..., description="When the turn was appended")


class ChatHistoryResponse(BaseModel):
    """Response DTO for a transcript lookup."""

    messages: list[TurnItem] = Field(
        default_factory=list,
        description="Turns in conversation order (empty for unknown sessions)",
    )


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    message: str = Field(..., description="Human-readable status message")


class ServicesStatus(BaseModel):
    database: str = Field(..., description="'connected' or 'disconnected'")
    cache: str = Field(..., description="Active cache backend: 'redis' or 'memory'")
    queue: str = Field(..., description="Active queue backend: 'redis' or 'memory'")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="'OK' when the database answers, else 'DEGRADED'")
    timestamp: datetime = Field(..., description="Server time")
    services: ServicesStatus


class PageViewItem(BaseModel):
    page: str
    count: int


class DailyVisitItem(BaseModel):
    date: str
    count: int


class AnalyticsSummaryResponse(BaseModel):
    """Response DTO for the analytics summary."""

    model_config = ConfigDict(populate_by_name=True)

    page_views: list[PageViewItem] = Field(default_factory=list, alias="pageViews")
    daily_visits: list[DailyVisitItem] = Field(default_factory=list, alias="dailyVisits")
    unique_visitors: int = Field(0, alias="uniqueVisitors", ge=0)
    total_visits: int = Field(0, alias="totalVisits", ge=0)


class ContactMessageItem(BaseModel):
    """A stored contact form message, as shown in the admin inbox."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    email: str
    subject: str
    message: str
    read: bool = Field(False, description="Set once an admin has opened the message")
    replied: bool = False
    created_at: datetime = Field(..., alias="createdAt")


class ContactMessageListResponse(BaseModel):
    """Response DTO for one page of the admin inbox."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ContactMessageItem] = Field(default_factory=list, description="Newest first")
    total: int = Field(0, ge=0, description="Messages matching the filter across all pages")
    page: int = Field(1, ge=1)
    total_pages: int = Field(0, alias="totalPages", ge=0)
