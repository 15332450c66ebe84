"""Redis implementation of JobQueue.

Jobs are pushed as JSON envelopes onto one Redis list per job name and
consumed by a background worker task with BLPOP. A failed push runs the job
in-process instead of dropping it.
"""

import asyncio
import json
import logging
from typing import Any

import redis.asyncio as aioredis

from portfolio_backend.protocols import JobHandler
from portfolio_backend.repositories.local_queue import LocalJobQueue, run_job
from portfolio_backend.repositories.redis_cache import REMOTE_ERRORS

logger = logging.getLogger(__name__)


class RedisJobQueue:
    """Redis list-backed job queue with an in-process worker.

    This class satisfies the JobQueue protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        prefix: str = "queue",
        poll_timeout: int = 1,
        error_delay: float = 1.0,
    ) -> None:
        """Initialize the Redis job queue.

        Args:
            redis_client: A connected async Redis client.
            prefix: Namespace for queue keys (``{prefix}:{job name}``).
            poll_timeout: BLPOP timeout in seconds.
            error_delay: Pause after a failed BLPOP before polling again.
        """
        self._client = redis_client
        self._prefix = prefix
        self._poll_timeout = poll_timeout
        self._error_delay = error_delay
        self._local = LocalJobQueue()
        self._worker: asyncio.Task | None = None

    @property
    def mode(self) -> str:
        return "redis"

    def queue_key(self, name: str) -> str:
        return f"{self._prefix}:{name}"

    def register(self, name: str, handler: JobHandler) -> None:
        self._local.register(name, handler)

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        if self._local.handler_for(name) is None:
            logger.error("No handler registered for job %r, dropping it", name)
            return
        envelope = json.dumps({"name": name, "payload": payload})
        try:
            await self._client.rpush(self.queue_key(name), envelope)
        except REMOTE_ERRORS as e:
            logger.warning("Redis RPUSH for job %r failed (%s), running it in-process", name, e)
            self._local.submit(name, payload)

    async def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._work_loop())
            logger.info("Redis job worker started")

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
            logger.info("Redis job worker stopped")
        await self._local.stop()

    async def process_next(self) -> bool:
        """Pop and run at most one job.

        Returns:
            True if a job was popped, False if the poll timed out
        """
        keys = [self.queue_key(name) for name in self._local.handler_names]
        if not keys:
            await asyncio.sleep(self._poll_timeout)
            return False

        item = await self._client.blpop(keys, timeout=self._poll_timeout)
        if item is None:
            return False

        _, raw = item
        try:
            envelope = json.loads(raw)
            name = envelope["name"]
            payload = envelope["payload"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.error("Discarding malformed job envelope %r: %s", raw, e)
            return True

        handler = self._local.handler_for(name)
        if handler is None:
            logger.error("No handler registered for job %r, dropping it", name)
            return True
        await run_job(name, handler, payload)
        return True

    async def _work_loop(self) -> None:
        while True:
            try:
                await self.process_next()
            except REMOTE_ERRORS as e:
                logger.warning("Redis job worker poll failed: %s", e)
                await asyncio.sleep(self._error_delay)
