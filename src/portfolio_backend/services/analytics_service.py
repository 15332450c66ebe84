"""Fire-and-forget page-view analytics.

Requests hand events to a bounded in-memory queue and return immediately;
a background task drains the queue into the analytics store.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from portfolio_backend.entities import AnalyticsEventEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.protocols import AnalyticsStore

logger = logging.getLogger(__name__)


class AnalyticsSink:
    """Bounded queue plus background drain in front of an AnalyticsStore.

    ``track`` never blocks and never raises: when the queue is full the
    event is dropped and a warning is logged.
    """

    def __init__(
        self,
        repository: AnalyticsStore,
        max_queue_size: int = 1000,
        drain_timeout: float = 2.0,
    ) -> None:
        """Initialize the sink.

        Args:
            repository: Where events are persisted.
            max_queue_size: Events buffered before new ones are dropped.
            drain_timeout: Seconds ``stop`` waits for buffered events.
        """
        self._repository = repository
        self._queue: asyncio.Queue[AnalyticsEventEntity] = asyncio.Queue(maxsize=max_queue_size)
        self._drain_timeout = drain_timeout
        self._task: asyncio.Task | None = None
        self._dropped = 0

    @property
    def dropped(self) -> int:
        """Number of events dropped because the queue was full."""
        return self._dropped

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def track(self, event: AnalyticsEventEntity) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning("Analytics queue full, dropping event for %s", event.page)

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._drain_loop())

    async def stop(self) -> None:
        """Flush buffered events (bounded by ``drain_timeout``) and stop."""
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), self._drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("Analytics drain timed out with %d events pending", self._queue.qsize())
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def flush(self) -> None:
        """Wait until every buffered event has been handled."""
        await self._queue.join()

    async def summary(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, Any]:
        return await self._repository.summary(start, end)

    async def _drain_loop(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._repository.add(event)
            except PersistenceError as e:
                logger.error("Analytics save error: %s", e)
            except Exception:
                logger.exception("Unexpected analytics save error")
            finally:
                self._queue.task_done()
