"""
Tests for the room-based WebSocket channel.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from portfolio_backend.api.app import create_app
from portfolio_backend.handlers.realtime_handler import SOCKET_ERROR, RealtimeHandler
from portfolio_backend.services import RoomManager

from .conftest import FakeProvider

AI_REPLY = "Saya sedang online."


@pytest.fixture
def client(settings):
    app = create_app(settings, provider=FakeProvider(reply=AI_REPLY))
    with TestClient(app) as client:
        yield client


def join(ws, room: str | None = None) -> dict:
    ws.send_json({"event": "join", "data": {"room": room} if room else {}})
    return ws.receive_json()


def test_join_default_room(client):
    with client.websocket_connect("/ws") as ws:
        frame = join(ws)

    assert frame == {"event": "joined", "data": {"room": "general", "message": "Joined room: general"}}


def test_chat_message_is_broadcast_to_room(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        join(alice, "portfolio")
        join(bob, "portfolio")

        alice.send_json(
            {
                "event": "chat message",
                "data": {"room": "portfolio", "message": "halo", "user": "Alice", "sessionId": "ws-1"},
            }
        )
        to_alice = alice.receive_json()
        to_bob = bob.receive_json()

    assert to_alice == to_bob
    assert to_alice["event"] == "chat response"
    data = to_alice["data"]
    assert data["user"] == "Alice"
    assert data["message"] == "halo"
    assert data["response"] == AI_REPLY
    assert data["sessionId"] == "ws-1"
    assert data["timestamp"]

    history = client.get("/api/chat/history/ws-1").json()["messages"]
    assert [m["role"] for m in history] == ["user", "assistant"]


def test_chat_message_defaults_user(client):
    with client.websocket_connect("/ws") as ws:
        join(ws)
        ws.send_json({"event": "chat message", "data": {"message": "halo"}})
        frame = ws.receive_json()

    assert frame["data"]["user"] == "Anonymous"


def test_blank_chat_message_errors_to_sender_only(client):
    with client.websocket_connect("/ws") as ws:
        join(ws)
        ws.send_json({"event": "chat message", "data": {"message": "  "}})
        frame = ws.receive_json()

    assert frame["event"] == "chat response"
    assert "error" in frame["data"]


def test_typing_reaches_peers_only(client):
    with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
        join(alice)
        join(bob)

        alice.send_json({"event": "typing", "data": {"user": "Alice", "isTyping": True}})
        frame = bob.receive_json()

        # Alice's next frame is her own join reply, not her typing echo.
        alice.send_json({"event": "join", "data": {"room": "general"}})
        assert alice.receive_json()["event"] == "joined"

    assert frame == {"event": "typing", "data": {"user": "Alice", "isTyping": True}}


def test_unknown_event_and_malformed_frame(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "dance", "data": {}})
        unknown = ws.receive_json()
        ws.send_text("not json")
        malformed = ws.receive_json()

    assert unknown["event"] == "error"
    assert "dance" in unknown["data"]["error"]
    assert malformed["event"] == "error"


def test_disconnect_leaves_rooms(client):
    rooms: RoomManager = client.app.state.container.rooms
    with client.websocket_connect("/ws") as ws:
        join(ws, "lobby")
        assert "lobby" in rooms.rooms()

    client.get("/api/health")
    assert "lobby" not in rooms.rooms()


class FakeSocket:
    def __init__(self, broken: bool = False) -> None:
        self.frames = []
        self.broken = broken

    async def send_json(self, data) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.frames.append(data)


async def test_broadcast_skips_excluded_and_drops_dead_sockets():
    rooms = RoomManager()
    sender, peer, dead = FakeSocket(), FakeSocket(), FakeSocket(broken=True)
    for ws in (sender, peer, dead):
        rooms.join("general", ws)

    delivered = await rooms.broadcast("general", "typing", {"isTyping": True}, exclude=sender)

    assert delivered == 1
    assert sender.frames == []
    assert peer.frames == [{"event": "typing", "data": {"isTyping": True}}]
    assert [id(ws) for ws in rooms.members("general")] == [id(sender), id(peer)]


def test_empty_room_is_removed():
    rooms = RoomManager()
    ws = FakeSocket()
    rooms.join("a", ws)
    rooms.join("b", ws)

    rooms.leave_all(ws)

    assert rooms.rooms() == []


def test_typing_is_relayed_while_a_reply_is_pending(settings):
    """A slow completion does not hold up later frames from the same socket."""
    app = create_app(settings, provider=FakeProvider(reply=AI_REPLY, delay=0.5))
    with TestClient(app) as client:
        with client.websocket_connect("/ws") as alice, client.websocket_connect("/ws") as bob:
            join(alice)
            join(bob)

            alice.send_json({"event": "chat message", "data": {"message": "halo", "sessionId": "slow"}})
            alice.send_json({"event": "typing", "data": {"user": "Alice", "isTyping": False}})
            first = bob.receive_json()
            second = bob.receive_json()
            assert alice.receive_json()["event"] == "chat response"

    assert first == {"event": "typing", "data": {"user": "Alice", "isTyping": False}}
    assert second["event"] == "chat response"
    assert second["data"]["response"] == AI_REPLY


class ExplodingChat:
    async def handle_message(self, *args, **kwargs):
        raise RuntimeError("boom")


async def test_unexpected_chat_error_is_reported_to_sender(caplog):
    rooms = RoomManager()
    handler = RealtimeHandler(ExplodingChat(), rooms)
    sender, peer = FakeSocket(), FakeSocket()
    rooms.join("general", sender)
    rooms.join("general", peer)

    with caplog.at_level(logging.ERROR, logger="portfolio_backend.handlers.realtime_handler"):
        await handler.on_chat_message(sender, {"message": "halo"}, "203.0.113.7")

    assert sender.frames == [{"event": "chat response", "data": {"error": SOCKET_ERROR}}]
    assert peer.frames == []
    assert "boom" in caplog.text
