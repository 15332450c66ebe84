"""Request DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ChatRequest(BaseModel):
    """Request DTO for sending a chat message.

    The handler will convert this to a ChatService.handle_message call.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="The user message", min_length=1, max_length=4000)
    session_id: str | None = Field(
        None,
        alias="sessionId",
        description="Conversation id; derived from the caller address when omitted",
        max_length=255,
    )

    @field_validator("message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be blank")
        return value


class ContactRequest(BaseModel):
    """Request DTO for the contact form."""

    name: str = Field(..., description="Sender name", min_length=2, max_length=255)
    email: str = Field(..., description="Sender email address", pattern=EMAIL_PATTERN, max_length=255)
    subject: str = Field(..., description="Message subject", min_length=3, max_length=255)
    message: str = Field(..., description="Message body", min_length=10, max_length=10000)

    @field_validator("name", "subject", "message", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value
