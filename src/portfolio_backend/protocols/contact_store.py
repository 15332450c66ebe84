"""Contact message persistence protocol."""

from typing import Protocol, runtime_checkable

from portfolio_backend.entities import ContactMessageEntity


@runtime_checkable
class ContactStore(Protocol):
    """Protocol for the contact form inbox.

    Every method raises PersistenceError when the store cannot be reached.
    """

    async def add(self, message: ContactMessageEntity) -> ContactMessageEntity:
        """Persist a submitted message and return it with its id."""
        ...

    async def list_messages(
        self,
        read: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ContactMessageEntity]:
        """Newest messages first, optionally only read or only unread ones."""
        ...

    async def count(self, read: bool | None = None) -> int:
        ...

    async def mark_read(self, message_id: int) -> ContactMessageEntity | None:
        """Flag a message as read; None when the id is unknown."""
        ...
