"""HTTP handlers for the contact form and the admin inbox."""

import logging

from fastapi import HTTPException, status

from portfolio_backend.dto import (
    ContactMessageItem,
    ContactMessageListResponse,
    ContactRequest,
    MessageResponse,
)
from portfolio_backend.entities import ContactMessageEntity
from portfolio_backend.exceptions import PersistenceError
from portfolio_backend.handlers.admin import require_admin
from portfolio_backend.services import ContactService

logger = logging.getLogger(__name__)


class ContactHandler:
    """HTTP handlers for contact form submissions and their review."""

    def __init__(
        self,
        contact_service: ContactService,
        debug: bool = False,
        admin_token: str | None = None,
    ) -> None:
        self._contact = contact_service
        self._debug = debug
        self._admin_token = admin_token

    async def submit(self, request: ContactRequest) -> MessageResponse:
        """Handle POST /api/contact requests.

        Raises:
            HTTPException: 500 if the message cannot be stored
        """
        message = ContactMessageEntity(
            name=request.name,
            email=request.email,
            subject=request.subject,
            message=request.message,
        )
        try:
            await self._contact.submit(message)
        except PersistenceError as e:
            logger.error("Contact form error: %s", e)
            raise self._server_error(e) from e

        return MessageResponse(message="Message sent successfully")

    async def list_messages(
        self,
        token: str | None,
        page: int = 1,
        limit: int = 20,
        read: bool | None = None,
    ) -> ContactMessageListResponse:
        """Handle GET /api/admin/messages requests.

        Raises:
            HTTPException: 404/403 from the admin guard, 500 if the inbox
                cannot be read
        """
        require_admin(token, self._admin_token)
        try:
            result = await self._contact.list_messages(page=page, limit=limit, read=read)
        except PersistenceError as e:
            logger.error("Get messages error: %s", e)
            raise self._server_error(e) from e

        return ContactMessageListResponse(
            messages=[_to_item(message) for message in result.messages],
            total=result.total,
            page=result.page,
            total_pages=result.total_pages,
        )

    async def mark_read(self, token: str | None, message_id: int) -> ContactMessageItem:
        """Handle PUT /api/admin/messages/{id}/read requests.

        Raises:
            HTTPException: 404/403 from the admin guard, 404 for an unknown
                id, 500 if the update fails
        """
        require_admin(token, self._admin_token)
        try:
            message = await self._contact.mark_read(message_id)
        except PersistenceError as e:
            logger.error("Mark message read error: %s", e)
            raise self._server_error(e) from e

        if message is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
        return _to_item(message)

    def _server_error(self, e: PersistenceError) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error ({e})" if self._debug else "Server error",
        )


def _to_item(message: ContactMessageEntity) -> ContactMessageItem:
    return ContactMessageItem(
        id=message.id,
        name=message.name,
        email=message.email,
        subject=message.subject,
        message=message.message,
        read=message.read,
        replied=message.replied,
        created_at=message.created_at,
    )
