"""SQLAlchemy implementation of ContactStore."""

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError

from portfolio_backend.entities import ContactMessageEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.repositories.database import Database
from portfolio_backend.repositories.tables import ContactMessageRow


class SqlContactRepository:
    """Contact form inbox backed by the ``contact_messages`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def add(self, message: ContactMessageEntity) -> ContactMessageEntity:
        row = ContactMessageRow(
            name=message.name,
            email=message.email,
            subject=message.subject,
            message=message.message,
            read=message.read,
            replied=message.replied,
            created_at=message.created_at,
        )
        try:
            async with self._db.session() as session:
                session.add(row)
                await session.flush()
                return self._to_entity(row)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save contact message: {e}") from e

    async def list_messages(
        self,
        read: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ContactMessageEntity]:
        query = (
            _filter_read(select(ContactMessageRow), read)
            .order_by(ContactMessageRow.created_at.desc(), ContactMessageRow.id.desc())
            .limit(limit)
            .offset(offset)
        )
        try:
            async with self._db.session() as session:
                rows = (await session.scalars(query)).all()
                return [self._to_entity(row) for row in rows]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to list contact messages: {e}") from e

    async def count(self, read: bool | None = None) -> int:
        query = _filter_read(select(func.count(ContactMessageRow.id)), read)
        try:
            async with self._db.session() as session:
                return int(await session.scalar(query) or 0)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to count contact messages: {e}") from e

    async def mark_read(self, message_id: int) -> ContactMessageEntity | None:
        try:
            async with self._db.session() as session:
                row = await session.get(ContactMessageRow, message_id)
                if row is None:
                    return None
                row.read = True
                await session.flush()
                return self._to_entity(row)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update contact message {message_id}: {e}") from e

    @staticmethod
    def _to_entity(row: ContactMessageRow) -> ContactMessageEntity:
        return ContactMessageEntity(
            id=row.id,
            name=row.name,
            email=row.email,
            subject=row.subject,
            message=row.message,
            read=bool(row.read),
            replied=bool(row.replied),
            created_at=row.created_at,
        )


def _filter_read(query: Select, read: bool | None) -> Select:
    if read is None:
        return query
    return query.where(ContactMessageRow.read == read)
