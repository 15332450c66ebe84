"""
Tests for page-view analytics.
"""

import logging
from datetime import datetime, timedelta, timezone

from portfolio_backend.entities import AnalyticsEventEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.repositories import SqlAnalyticsRepository
from portfolio_backend.services import AnalyticsSink


class BrokenStore:
    async def add(self, event):
        raise PersistenceError("database is locked")

    async def summary(self, start=None, end=None):
        return {}


async def test_sink_persists_events_and_summarizes(database):
    sink = AnalyticsSink(SqlAnalyticsRepository(database))
    await sink.start()

    for page, ip in [("/", "10.0.0.1"), ("/projects", "10.0.0.1"), ("/", "10.0.0.2")]:
        sink.track(AnalyticsEventEntity(page=page, ip=ip))
    await sink.flush()

    summary = await sink.summary()
    await sink.stop()

    assert summary["totalVisits"] == 3
    assert summary["uniqueVisitors"] == 2
    assert summary["pageViews"][0] == {"page": "/", "count": 2}
    assert len(summary["dailyVisits"]) == 1
    assert summary["dailyVisits"][0]["count"] == 3


async def test_summary_respects_date_range(database):
    repo = SqlAnalyticsRepository(database)
    now = datetime.now(timezone.utc)
    await repo.add(AnalyticsEventEntity(page="/old", ip="1.1.1.1", timestamp=now - timedelta(days=10)))
    await repo.add(AnalyticsEventEntity(page="/new", ip="1.1.1.1", timestamp=now))

    summary = await repo.summary(start=now - timedelta(days=1))

    assert summary["totalVisits"] == 1
    assert summary["pageViews"] == [{"page": "/new", "count": 1}]


async def test_empty_summary(database):
    summary = await SqlAnalyticsRepository(database).summary()
    assert summary == {"pageViews": [], "dailyVisits": [], "uniqueVisitors": 0, "totalVisits": 0}


async def test_full_queue_drops_events(caplog):
    sink = AnalyticsSink(BrokenStore(), max_queue_size=1)

    with caplog.at_level(logging.WARNING):
        sink.track(AnalyticsEventEntity(page="/", ip="1.1.1.1"))
        sink.track(AnalyticsEventEntity(page="/about", ip="1.1.1.1"))

    assert sink.pending == 1
    assert sink.dropped == 1
    assert "dropping event for /about" in caplog.text


async def test_store_failure_is_logged_not_raised(caplog):
    sink = AnalyticsSink(BrokenStore())
    await sink.start()

    with caplog.at_level(logging.ERROR):
        sink.track(AnalyticsEventEntity(page="/", ip="1.1.1.1"))
        await sink.flush()
    await sink.stop()

    assert "Analytics save error" in caplog.text
    assert sink.pending == 0
