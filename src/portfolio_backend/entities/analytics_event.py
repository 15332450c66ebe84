"""Page-view analytics domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class AnalyticsEventEntity:
    """A single page view.

    Attributes:
        page: Request path
        ip: Caller network address
        user_agent: User-Agent header or "unknown"
        referrer: Referer header or "direct"
        timestamp: When the request was received (UTC)
    """

    page: str
    ip: str
    user_agent: str = "unknown"
    referrer: str = "direct"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
