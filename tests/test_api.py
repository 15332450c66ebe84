"""
Tests for the portfolio backend API.
"""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from portfolio_backend.api.app import create_app
from portfolio_backend.services import REQUEST_FALLBACK_REPLIES

from .conftest import FakeProvider, RecordingMailer

AI_REPLY = "Halo! Ada yang bisa saya bantu?"


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(settings, mailer):
    """Create a test client with the lifespan running."""
    app = create_app(settings, provider=FakeProvider(reply=AI_REPLY), mailer=mailer)
    with TestClient(app) as client:
        yield client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Portfolio Backend API"


def test_health(client):
    """Test health check endpoint without Redis."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["services"] == {"database": "connected", "cache": "memory", "queue": "memory"}


def test_chat_round_trip(client):
    """Test chat endpoint and the stored history."""
    response = client.post("/api/chat", json={"message": "hello", "sessionId": "s1"})
    assert response.status_code == 200
    assert response.json() == {"message": AI_REPLY, "sessionId": "s1"}

    history = client.get("/api/chat/history/s1").json()["messages"]
    assert [(m["role"], m["content"]) for m in history] == [
        ("user", "hello"),
        ("assistant", AI_REPLY),
    ]


def test_chat_without_session_id_uses_client_address(client):
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 200
    session_id = response.json()["sessionId"]
    assert session_id

    assert len(client.get(f"/api/chat/history/{session_id}").json()["messages"]) == 2


def test_chat_falls_back_when_ai_is_not_configured(settings):
    """The real HTTP provider without AI_API_URL answers with a canned reply."""
    with TestClient(create_app(settings)) as client:
        response = client.post("/api/chat", json={"message": "hello", "sessionId": "s1"})

    assert response.status_code == 200
    assert response.json()["message"] in REQUEST_FALLBACK_REPLIES


@pytest.mark.parametrize("body", [{"message": ""}, {"message": "   "}, {}])
def test_chat_rejects_blank_message(client, body):
    response = client.post("/api/chat", json=body)
    assert response.status_code == 422


def test_unknown_history_is_empty(client):
    response = client.get("/api/chat/history/nobody")
    assert response.status_code == 200
    assert response.json() == {"messages": []}


def test_contact(client):
    response = client.post(
        "/api/contact",
        json={
            "name": "Ana",
            "email": "Ana@Example.com",
            "subject": "Kerja sama",
            "message": "Halo, saya tertarik dengan proyek Anda.",
        },
    )
    assert response.status_code == 201
    assert response.json() == {"message": "Message sent successfully"}


def test_contact_auto_reply_is_delivered(settings):
    mailer = RecordingMailer()
    with TestClient(create_app(settings, mailer=mailer)) as client:
        client.post(
            "/api/contact",
            json={
                "name": "Ana",
                "email": "Ana@Example.com",
                "subject": "Kerja sama",
                "message": "Halo, saya tertarik dengan proyek Anda.",
            },
        )

    assert [job.to for job in mailer.sent] == ["ana@example.com"]


def test_contact_validation(client):
    response = client.post(
        "/api/contact",
        json={"name": "A", "email": "not-an-email", "subject": "Hi", "message": "short"},
    )
    assert response.status_code == 422


def test_unknown_api_route(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"message": "API endpoint not found"}


def test_admin_analytics_requires_token(client):
    assert client.get("/api/admin/analytics").status_code == 403
    assert client.get("/api/admin/analytics", headers={"X-Admin-Token": "wrong"}).status_code == 403


def test_admin_analytics_hidden_without_configured_token(settings):
    with TestClient(create_app(replace(settings, admin_token=None))) as client:
        response = client.get("/api/admin/analytics", headers={"X-Admin-Token": "secret"})

    assert response.status_code == 404


def test_admin_analytics_counts_page_views(client):
    client.get("/api/health")
    client.get("/api/health")
    client.get("/favicon.ico")
    container = client.app.state.container
    client.portal.call(container.analytics.flush)

    response = client.get("/api/admin/analytics", headers={"X-Admin-Token": "secret"})

    assert response.status_code == 200
    data = response.json()
    assert {"page": "/api/health", "count": 2} in data["pageViews"]
    assert all(item["page"] != "/favicon.ico" for item in data["pageViews"])
    assert data["totalVisits"] >= 2
    assert data["uniqueVisitors"] == 1


def test_static_frontend_is_served(settings, tmp_path):
    static_dir = tmp_path / "public"
    static_dir.mkdir()
    (static_dir / "about.html").write_text("<h1>About</h1>")

    with TestClient(create_app(settings)) as client:
        response = client.get("/about.html")

    assert response.status_code == 200
    assert "About" in response.text


def send_contact(client, subject: str) -> None:
    response = client.post(
        "/api/contact",
        json={
            "name": "Ana",
            "email": "ana@example.com",
            "subject": subject,
            "message": "Halo, saya tertarik dengan proyek Anda.",
        },
    )
    assert response.status_code == 201


def test_admin_messages_pagination(client):
    for subject in ("Pertama", "Kedua", "Ketiga"):
        send_contact(client, subject)

    response = client.get(
        "/api/admin/messages", params={"page": 1, "limit": 2}, headers={"X-Admin-Token": "secret"}
    )

    assert response.status_code == 200
    data = response.json()
    assert (data["total"], data["page"], data["totalPages"]) == (3, 1, 2)
    assert len(data["messages"]) == 2
    item = data["messages"][0]
    assert item["read"] is False
    assert item["replied"] is False
    assert item["createdAt"]


def test_admin_mark_message_read(client):
    send_contact(client, "Kerja sama")
    headers = {"X-Admin-Token": "secret"}
    message_id = client.get("/api/admin/messages", headers=headers).json()["messages"][0]["id"]

    response = client.put(f"/api/admin/messages/{message_id}/read", headers=headers)

    assert response.status_code == 200
    assert response.json()["read"] is True
    unread = client.get("/api/admin/messages", params={"read": "false"}, headers=headers).json()
    assert unread["total"] == 0


def test_admin_mark_unknown_message(client):
    response = client.put("/api/admin/messages/999/read", headers={"X-Admin-Token": "secret"})

    assert response.status_code == 404
    assert response.json() == {"detail": "Message not found"}


def test_admin_messages_require_token(client):
    assert client.get("/api/admin/messages").status_code == 403
    assert client.put("/api/admin/messages/1/read", headers={"X-Admin-Token": "wrong"}).status_code == 403
    assert client.get("/api/admin/messages", params={"page": 0}, headers={"X-Admin-Token": "secret"}).status_code == 422
