"""SQLAlchemy implementation of AnalyticsStore."""

from datetime import datetime
from typing import Any

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import SQLAlchemyError

from portfolio_backend.entities import AnalyticsEventEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.repositories.database import Database
from portfolio_backend.repositories.tables import AnalyticsEventRow

TOP_PAGES_LIMIT = 20
DAILY_VISITS_LIMIT = 30


class SqlAnalyticsRepository:
    """Page-view log backed by the ``analytics_events`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def add(self, event: AnalyticsEventEntity) -> None:
        try:
            async with self._db.session() as session:
                session.add(
                    AnalyticsEventRow(
                        page=event.page,
                        ip=event.ip,
                        user_agent=event.user_agent,
                        referrer=event.referrer,
                        timestamp=event.timestamp,
                    )
                )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save analytics event: {e}") from e

    async def summary(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, Any]:
        """Aggregate page views in ``[start, end]``.

        Returns:
            Dict with:
            - pageViews: top pages by count, descending
            - dailyVisits: visits per calendar day, ascending
            - uniqueVisitors: distinct caller addresses
            - totalVisits: number of events
        """
        conditions = []
        if start is not None:
            conditions.append(AnalyticsEventRow.timestamp >= start)
        if end is not None:
            conditions.append(AnalyticsEventRow.timestamp <= end)

        count = func.count(AnalyticsEventRow.id).label("count")
        day = func.date(AnalyticsEventRow.timestamp).label("day")

        page_query = (
            select(AnalyticsEventRow.page, count)
            .where(*conditions)
            .group_by(AnalyticsEventRow.page)
            .order_by(count.desc())
            .limit(TOP_PAGES_LIMIT)
        )
        daily_query = (
            select(day, count).where(*conditions).group_by(day).order_by(day).limit(DAILY_VISITS_LIMIT)
        )
        unique_query = select(func.count(distinct(AnalyticsEventRow.ip))).where(*conditions)
        total_query = select(func.count(AnalyticsEventRow.id)).where(*conditions)

        try:
            async with self._db.session() as session:
                pages = (await session.execute(page_query)).all()
                daily = (await session.execute(daily_query)).all()
                unique_visitors = await session.scalar(unique_query)
                total_visits = await session.scalar(total_query)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to aggregate analytics: {e}") from e

        return {
            "pageViews": [{"page": page, "count": n} for page, n in pages],
            "dailyVisits": [{"date": str(d), "count": n} for d, n in daily],
            "uniqueVisitors": unique_visitors or 0,
            "totalVisits": total_visits or 0,
        }
