"""HTTP handlers for chat operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging

from fastapi import HTTPException, status

from portfolio_backend.dto import ChatHistoryResponse, ChatRequest, ChatResponse, TurnItem
from portfolio_backend.exceptions import EmptyMessageError, PersistenceError
from portfolio_backend.services import ChatService

logger = logging.getLogger(__name__)

CHAT_UNAVAILABLE = "Maaf, layanan chat sedang bermasalah. Silakan coba lagi nanti."


class ChatHandler:
    """HTTP handlers for chat operations.

    AI provider failures never reach this layer (the service substitutes a
    canned reply). Only persistence failures become a 500, with details
    exposed in development mode only.

    Example:
        ```python
        handler = ChatHandler(chat_service=chat_service, timeout=10)

        @app.post("/api/chat", response_model=ChatResponse)
        async def chat(request: ChatRequest, http_request: Request):
            return await handler.chat(request, http_request.client.host)
        ```
    """

    def __init__(self, chat_service: ChatService, timeout: float = 10.0, debug: bool = False) -> None:
        """Initialize the chat handler.

        Args:
            chat_service: The chat service for business logic (required).
            timeout: Completion budget for the request path in seconds.
            debug: Include error details in 500 responses.
        """
        self._chat = chat_service
        self._timeout = timeout
        self._debug = debug

    async def chat(self, request: ChatRequest, client_address: str | None) -> ChatResponse:
        """Handle POST /api/chat requests.

        Raises:
            HTTPException: 400 for a blank message, 500 if the transcript store fails
        """
        try:
            reply = await self._chat.handle_message(
                request.message,
                session_id=request.session_id,
                client_address=client_address,
                timeout=self._timeout,
            )
        except EmptyMessageError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        except PersistenceError as e:
            logger.error("Chat API error: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=self._error_detail(CHAT_UNAVAILABLE, e),
            ) from e

        return ChatResponse(message=reply.message, session_id=reply.session_id)

    async def history(self, session_id: str) -> ChatHistoryResponse:
        """Handle GET /api/chat/history/{session_id} requests.

        Raises:
            HTTPException: 500 if the transcript store fails
        """
        try:
            turns = await self._chat.get_history(session_id)
        except PersistenceError as e:
            logger.error("Get chat history error: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=self._error_detail("Server error", e),
            ) from e

        return ChatHistoryResponse(
            messages=[
                TurnItem(role=turn.role.value, content=turn.content, timestamp=turn.timestamp)
                for turn in turns
            ]
        )

    def _error_detail(self, message: str, error: Exception) -> str:
        return f"{message} ({error})" if self._debug else message
