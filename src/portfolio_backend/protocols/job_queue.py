"""Background job queue protocol."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

JobHandler = Callable[[dict[str, Any]], Awaitable[None]]


@runtime_checkable
class JobQueue(Protocol):
    """Protocol for fire-and-forget job queues.

    ``enqueue`` never raises and never blocks on the job itself. Delivery is
    best-effort: the in-memory queue runs the handler right away on the event
    loop, the Redis queue hands it to a background worker.
    """

    @property
    def mode(self) -> str:
        """Return the active backend name ("redis" or "memory")."""
        ...

    def register(self, name: str, handler: JobHandler) -> None:
        """Register the coroutine that processes jobs named ``name``."""
        ...

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        """Submit a job.

        Args:
            name: Queue / job type name (e.g. "email")
            payload: JSON-serializable job data
        """
        ...

    async def start(self) -> None:
        """Start background workers, if any."""
        ...

    async def stop(self) -> None:
        """Stop background workers and wait for in-flight jobs."""
        ...
