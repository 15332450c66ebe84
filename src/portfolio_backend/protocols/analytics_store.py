"""Analytics persistence protocol."""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from portfolio_backend.entities import AnalyticsEventEntity


@runtime_checkable
class AnalyticsStore(Protocol):
    """Protocol for page-view persistence and reporting."""

    async def add(self, event: AnalyticsEventEntity) -> None:
        """Persist one page view.

        Raises:
            PersistenceError: If the write fails
        """
        ...

    async def summary(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, Any]:
        """Aggregate page views in ``[start, end]``.

        Returns:
            Dict with pageViews, dailyVisits, uniqueVisitors and totalVisits
        """
        ...
