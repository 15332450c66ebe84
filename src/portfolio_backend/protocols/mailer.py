"""Outbound email protocol."""

from typing import Protocol, runtime_checkable

from portfolio_backend.entities import EmailJob


@runtime_checkable
class Mailer(Protocol):
    """Protocol for email delivery backends."""

    async def send(self, job: EmailJob) -> None:
        """Deliver one email (raises on delivery failure)."""
        ...
