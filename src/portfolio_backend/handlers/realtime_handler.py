"""WebSocket handler for the room-based chat channel.

Client frames:
    {"event": "join", "data": {"room": "general"}}
    {"event": "chat message", "data": {"room": "general", "message": "hi", "user": "Ana", "sessionId": "s1"}}
    {"event": "typing", "data": {"room": "general", "user": "Ana", "isTyping": true}}

Server frames:
    joined          -> sender only
    chat response   -> whole room ({user, message, response, timestamp, sessionId})
                       or sender only ({error})
    typing          -> room peers except the sender
    error           -> sender only (unknown event / malformed frame)
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from portfolio_backend.exceptions import EmptyMessageError, PersistenceError
from portfolio_backend.services import DEFAULT_ROOM, SOCKET_FALLBACK_REPLIES, ChatService, RoomManager

logger = logging.getLogger(__name__)

SOCKET_ERROR = "Maaf, terjadi kesalahan pada server."


class RealtimeHandler:
    """Serves one WebSocket connection per ``serve`` call.

    Chat messages go through the same ChatService as the REST endpoint, with
    the shorter socket timeout, and the reply is broadcast to the room. Each
    chat message runs as its own task so join and typing frames from the
    same connection are not held up by a pending completion.
    """

    def __init__(
        self,
        chat_service: ChatService,
        rooms: RoomManager,
        timeout: float = 5.0,
    ) -> None:
        """Initialize the realtime handler.

        Args:
            chat_service: The chat service shared with the REST endpoint.
            rooms: Room membership registry.
            timeout: Completion budget for the socket path in seconds.
        """
        self._chat = chat_service
        self._rooms = rooms
        self._timeout = timeout

    @property
    def rooms(self) -> RoomManager:
        return self._rooms

    async def serve(self, websocket: WebSocket) -> None:
        """Accept the connection and dispatch frames until it closes."""
        await websocket.accept()
        client_address = websocket.client.host if websocket.client else None
        logger.info("New socket connection from %s", client_address)
        pending: set[asyncio.Task] = set()
        try:
            while True:
                raw = await websocket.receive_text()
                await self.dispatch(websocket, raw, client_address, pending)
        except WebSocketDisconnect:
            pass
        finally:
            if pending:
                # Let in-flight exchanges persist and reach the rest of the room.
                await asyncio.gather(*pending, return_exceptions=True)
            self._rooms.leave_all(websocket)
            logger.info("Socket disconnected: %s", client_address)

    async def dispatch(
        self,
        websocket: WebSocket,
        raw: str,
        client_address: str | None,
        pending: set[asyncio.Task] | None = None,
    ) -> None:
        """Route one client frame.

        ``chat message`` is started as a task tracked in ``pending``; when no
        set is given it is awaited inline.
        """
        try:
            frame = json.loads(raw)
            event = frame["event"]
            data = frame.get("data") or {}
            if not isinstance(event, str) or not isinstance(data, dict):
                raise TypeError("event must be a string and data an object")
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            await self._rooms.emit(websocket, "error", {"error": f"Malformed frame: {e}"})
            return

        if event == "join":
            await self.on_join(websocket, data)
        elif event == "chat message":
            if pending is None:
                await self.on_chat_message(websocket, data, client_address)
            else:
                task = asyncio.create_task(self.on_chat_message(websocket, data, client_address))
                pending.add(task)
                task.add_done_callback(pending.discard)
        elif event == "typing":
            await self.on_typing(websocket, data)
        else:
            await self._rooms.emit(websocket, "error", {"error": f"Unknown event: {event}"})

    async def on_join(self, websocket: WebSocket, data: dict[str, Any]) -> None:
        room = _room(data)
        self._rooms.join(room, websocket)
        logger.info("Socket joined room %s", room)
        await self._rooms.emit(websocket, "joined", {"room": room, "message": f"Joined room: {room}"})

    async def on_chat_message(
        self,
        websocket: WebSocket,
        data: dict[str, Any],
        client_address: str | None,
    ) -> None:
        room = _room(data)
        message = data.get("message")
        if not isinstance(message, str) or not message.strip():
            await self._rooms.emit(websocket, "chat response", {"error": "Message must not be empty"})
            return

        session_id = data.get("sessionId")
        try:
            reply = await self._chat.handle_message(
                message,
                session_id=session_id if isinstance(session_id, str) else None,
                client_address=client_address,
                timeout=self._timeout,
                fallback_replies=SOCKET_FALLBACK_REPLIES,
            )
        except EmptyMessageError:
            await self._rooms.emit(websocket, "chat response", {"error": "Message must not be empty"})
            return
        except PersistenceError as e:
            logger.error("Socket chat error: %s", e)
            await self._rooms.emit(websocket, "chat response", {"error": SOCKET_ERROR})
            return
        except Exception:
            logger.exception("Unexpected error handling socket chat message")
            await self._rooms.emit(websocket, "chat response", {"error": SOCKET_ERROR})
            return

        await self._rooms.broadcast(
            room,
            "chat response",
            {
                "user": data.get("user") or "Anonymous",
                "message": message.strip(),
                "response": reply.message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "sessionId": reply.session_id,
            },
        )

    async def on_typing(self, websocket: WebSocket, data: dict[str, Any]) -> None:
        await self._rooms.broadcast(
            _room(data),
            "typing",
            {"user": data.get("user") or "Someone", "isTyping": bool(data.get("isTyping"))},
            exclude=websocket,
        )


def _room(data: dict[str, Any]) -> str:
    room = data.get("room")
    return room if isinstance(room, str) and room else DEFAULT_ROOM
