"""HTTP handlers for health and analytics reporting."""

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status

from portfolio_backend.dto import AnalyticsSummaryResponse, HealthCheckResponse, ServicesStatus
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.handlers.admin import require_admin
from portfolio_backend.protocols import CacheStore, JobQueue
from portfolio_backend.repositories import Database
from portfolio_backend.services import AnalyticsSink

logger = logging.getLogger(__name__)


class SystemHandler:
    """HTTP handlers for operational endpoints."""

    def __init__(
        self,
        database: Database,
        cache: CacheStore,
        queue: JobQueue,
        analytics: AnalyticsSink,
        admin_token: str | None = None,
    ) -> None:
        self._db = database
        self._cache = cache
        self._queue = queue
        self._analytics = analytics
        self._admin_token = admin_token

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /api/health requests."""
        db_healthy = await self._db.health_check()
        return HealthCheckResponse(
            status="OK" if db_healthy else "DEGRADED",
            timestamp=datetime.now(timezone.utc),
            services=ServicesStatus(
                database="connected" if db_healthy else "disconnected",
                cache=self._cache.mode,
                queue=self._queue.mode,
            ),
        )

    async def analytics_summary(
        self,
        token: str | None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> AnalyticsSummaryResponse:
        """Handle GET /api/admin/analytics requests.

        Raises:
            HTTPException: 404 when no admin token is configured, 403 on a
                token mismatch, 500 if aggregation fails
        """
        require_admin(token, self._admin_token)

        try:
            summary = await self._analytics.summary(start, end)
        except PersistenceError as e:
            logger.error("Get analytics error: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server error",
            ) from e

        return AnalyticsSummaryResponse.model_validate(summary)
