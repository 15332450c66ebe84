"""Contact form domain entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ContactMessageEntity:
    """A message submitted through the contact form."""

    name: str
    email: str
    subject: str
    message: str
    read: bool = False
    replied: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None


@dataclass(frozen=True)
class EmailJob:
    """Payload of the ``email`` queue."""

    to: str
    subject: str
    html: str

    def to_payload(self) -> dict[str, str]:
        return {"to": self.to, "subject": self.subject, "html": self.html}

    @classmethod
    def from_payload(cls, payload: dict) -> "EmailJob":
        return cls(to=payload["to"], subject=payload["subject"], html=payload["html"])
