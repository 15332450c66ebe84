"""Room membership and broadcast for WebSocket connections."""

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

DEFAULT_ROOM = "general"


class RoomManager:
    """Tracks which sockets are in which rooms and fans out events.

    Frames on the wire are JSON objects ``{"event": str, "data": dict}``.
    Sockets are keyed by ``id()``: Starlette connections are unhashable.
    Membership is only touched from the event loop, so no lock is needed.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, dict[int, WebSocket]] = {}

    def join(self, room: str, websocket: WebSocket) -> None:
        self._rooms.setdefault(room, {})[id(websocket)] = websocket

    def leave(self, room: str, websocket: WebSocket) -> None:
        members = self._rooms.get(room)
        if members is None:
            return
        members.pop(id(websocket), None)
        if not members:
            del self._rooms[room]

    def leave_all(self, websocket: WebSocket) -> None:
        for room in list(self._rooms):
            self.leave(room, websocket)

    def members(self, room: str) -> list[WebSocket]:
        return list(self._rooms.get(room, {}).values())

    def rooms(self) -> list[str]:
        return list(self._rooms)

    async def emit(self, websocket: WebSocket, event: str, data: dict[str, Any]) -> bool:
        """Send one frame to one socket.

        Returns:
            False if the socket is gone (it is then removed from every room)
        """
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug("Dropping unreachable socket: %s", e)
            self.leave_all(websocket)
            return False

    async def broadcast(
        self,
        room: str,
        event: str,
        data: dict[str, Any],
        exclude: WebSocket | None = None,
    ) -> int:
        """Send a frame to every member of ``room`` except ``exclude``.

        Returns:
            Number of sockets that received the frame
        """
        delivered = 0
        for member in self.members(room):
            if member is exclude:
                continue
            if await self.emit(member, event, data):
                delivered += 1
        return delivered
