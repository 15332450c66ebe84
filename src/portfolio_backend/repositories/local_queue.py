"""In-process implementation of JobQueue.

Jobs run as asyncio tasks as soon as they are enqueued. There is no
persistence and no retry: a crash loses in-flight jobs.
"""

import asyncio
import logging
from typing import Any

from portfolio_backend.protocols import JobHandler

logger = logging.getLogger(__name__)


class LocalJobQueue:
    """Runs each job immediately and asynchronously on the event loop.

    This class satisfies the JobQueue protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, JobHandler] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def mode(self) -> str:
        return "memory"

    @property
    def pending(self) -> int:
        """Number of jobs still running."""
        return len(self._tasks)

    def register(self, name: str, handler: JobHandler) -> None:
        self._handlers[name] = handler

    def handler_for(self, name: str) -> JobHandler | None:
        return self._handlers.get(name)

    @property
    def handler_names(self) -> list[str]:
        return list(self._handlers)

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        self.submit(name, payload)

    def submit(self, name: str, payload: dict[str, Any]) -> asyncio.Task | None:
        """Schedule a job on the running loop.

        Returns:
            The task running the job, or None if no handler is registered
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.error("No handler registered for job %r, dropping it", name)
            return None
        task = asyncio.create_task(run_job(name, handler, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def start(self) -> None:
        logger.info("Job queue running in-memory (%d handlers)", len(self._handlers))

    async def stop(self) -> None:
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


async def run_job(name: str, handler: JobHandler, payload: dict[str, Any]) -> None:
    """Run one job, logging instead of raising on failure."""
    try:
        await handler(payload)
    except Exception:
        logger.exception("Job %r failed", name)
