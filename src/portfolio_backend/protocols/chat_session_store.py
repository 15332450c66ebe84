"""Chat session persistence protocol."""

from typing import Protocol, runtime_checkable

from portfolio_backend.entities import ChatSessionEntity


@runtime_checkable
class ChatSessionStore(Protocol):
    """Protocol for chat transcript persistence.

    Only per-document atomicity is assumed: ``save`` replaces the whole
    transcript of one session.
    """

    async def find_by_session_id(self, session_id: str) -> ChatSessionEntity | None:
        """Load a session.

        Args:
            session_id: The (untrusted) session identifier

        Returns:
            The session, or None if it was never saved

        Raises:
            PersistenceError: If the store cannot be read or holds malformed data
        """
        ...

    async def save(self, session: ChatSessionEntity) -> None:
        """Insert or replace a session.

        Raises:
            PersistenceError: If the write fails
        """
        ...
