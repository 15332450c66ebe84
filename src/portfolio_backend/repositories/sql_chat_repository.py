"""SQLAlchemy implementation of ChatSessionStore."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portfolio_backend.entities import ChatSessionEntity, TurnEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.repositories.database import Database
from portfolio_backend.repositories.tables import ChatSessionRow

logger = logging.getLogger(__name__)


class SqlChatSessionRepository:
    """Stores each session as one row with a JSON transcript.

    This class satisfies the ChatSessionStore protocol through structural
    typing - no explicit inheritance needed.

    ``save`` is a read-modify-write upsert with no optimistic locking:
    the last writer for a session wins. When two writers both create the
    same new session, the loser of the insert retries as an update.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_by_session_id(self, session_id: str) -> ChatSessionEntity | None:
        try:
            async with self._db.session() as session:
                row = await session.scalar(
                    select(ChatSessionRow).where(ChatSessionRow.session_id == session_id)
                )
                if row is None:
                    return None
                return self._to_entity(row)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load chat session {session_id!r}: {e}") from e

    async def save(self, entity: ChatSessionEntity) -> None:
        try:
            try:
                await self._upsert(entity)
            except IntegrityError:
                logger.info("Chat session %s was created concurrently, updating it", entity.session_id)
                await self._upsert(entity)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to save chat session {entity.session_id!r}: {e}") from e

    async def _upsert(self, entity: ChatSessionEntity) -> None:
        messages = [turn.to_dict() for turn in entity.turns]
        async with self._db.session() as session:
            row = await session.scalar(
                select(ChatSessionRow).where(ChatSessionRow.session_id == entity.session_id)
            )
            if row is None:
                session.add(
                    ChatSessionRow(
                        session_id=entity.session_id,
                        messages=messages,
                        created_at=entity.created_at,
                        updated_at=entity.updated_at,
                    )
                )
            else:
                # Assign a new list: in-place JSON mutation is not tracked.
                row.messages = messages
                row.updated_at = entity.updated_at

    @staticmethod
    def _to_entity(row: ChatSessionRow) -> ChatSessionEntity:
        try:
            turns = [TurnEntity.from_dict(item) for item in row.messages or []]
        except (KeyError, ValueError, TypeError) as e:
            raise PersistenceError(f"Malformed transcript for session {row.session_id!r}: {e}") from e
        return ChatSessionEntity(
            session_id=row.session_id,
            turns=turns,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
