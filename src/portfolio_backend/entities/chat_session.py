"""Chat session domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TurnRole(str, Enum):
    """Author of a turn in a transcript."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TurnEntity:
    """One message in a chat transcript. Immutable once appended.

    Attributes:
        role: Who wrote the turn
        content: Message text
        timestamp: When the turn was appended (UTC)
    """

    role: TurnRole
    content: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, str]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TurnEntity":
        """Rebuild a turn from its stored form.

        Raises:
            KeyError, ValueError: If the stored data is malformed
        """
        return cls(
            role=TurnRole(data["role"]),
            content=str(data["content"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class ChatSessionEntity:
    """A session id and its ordered transcript.

    Turns are only ever appended; insertion order is conversation order.
    """

    session_id: str
    turns: list[TurnEntity] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(cls, session_id: str) -> "ChatSessionEntity":
        now = _utcnow()
        return cls(session_id=session_id, created_at=now, updated_at=now)

    def append(self, role: TurnRole, content: str) -> TurnEntity:
        turn = TurnEntity(role=role, content=content)
        self.turns.append(turn)
        return turn

    def trim(self, max_turns: int) -> int:
        """Drop the oldest turns so at most ``max_turns`` remain.

        Args:
            max_turns: Retention limit; 0 keeps everything

        Returns:
            Number of turns dropped
        """
        if max_turns <= 0 or len(self.turns) <= max_turns:
            return 0
        dropped = len(self.turns) - max_turns
        del self.turns[:dropped]
        return dropped

    def touch(self) -> None:
        self.updated_at = _utcnow()
