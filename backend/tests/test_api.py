# backend/tests/test_api.py
"""
HTTP API tests. Services run on the in-memory gateway through
app.dependency_overrides, so no database is needed.
"""
import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from roombridge import dependencies
from roombridge.main import app
from roombridge.shared.utils.ids import new_object_id


@pytest.fixture
def client(services):
    overrides = {
        dependencies.get_presence_store: lambda: services.presence,
        dependencies.get_user_directory: lambda: services.users,
        dependencies.get_room_engine: lambda: services.engine,
        dependencies.get_room_service: lambda: services.rooms,
        dependencies.get_message_pipeline: lambda: services.pipeline,
        dependencies.get_webhook_ingestor: lambda: services.ingestor,
        dependencies.get_contact_service: lambda: services.contacts,
        dependencies.get_response_service: lambda: services.responses,
        dependencies.get_settings_service: lambda: services.settings,
    }
    app.dependency_overrides.update(overrides)
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_room(client, phone="+54911"):
    response = client.post("/api/rooms", json={"phone": phone, "channel": "web", "source": "widget"})
    assert response.status_code == 201
    return response.json()


# --- HEALTH ---

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"
    assert "X-Request-ID" in response.headers


# --- ROOMS ---

def test_create_and_list_rooms(client):
    room = create_room(client)
    assert room["phone"] == "+54911"
    assert room["status"] == "closed"

    listing = client.get("/api/rooms", params={"page": 1, "limit": 10}).json()
    assert [r["id"] for r in listing["rooms"]] == [room["id"]]
    assert listing["pagination"]["total"] == 1


def test_create_room_validation_and_conflict(client):
    response = client.post("/api/rooms", json={"channel": "web", "source": "widget"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: phone"}

    create_room(client)
    response = client.post("/api/rooms", json={"phone": "+54911", "channel": "web", "source": "widget"})
    assert response.status_code == 409
    assert "error" in response.json()


def test_room_detail_errors(client):
    response = client.get("/api/rooms/not-an-id")
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid room ID"}

    response = client.get(f"/api/rooms/{new_object_id()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Room not found"}


def test_delete_room(client):
    room = create_room(client)
    response = client.delete(f"/api/rooms/{room['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "id": room["id"]}
    assert client.get(f"/api/rooms/{room['id']}").status_code == 404


def test_presence_controls(client, services):
    room = create_room(client)
    for sid in ("s1", "s2"):
        asyncio.run(services.engine.join_room(sid, room["id"]))

    connections = client.get(f"/api/rooms/{room['id']}/connections").json()
    assert connections["connectedSockets"] == ["s1", "s2"]
    assert connections["status"] == "open"
    assert [u["socketId"] for u in connections["users"]] == ["s1", "s2"]

    result = client.post(f"/api/rooms/{room['id']}/disconnect", json={"socketId": "s1"}).json()
    assert result["remaining"] == 1
    assert services.bus.of("disconnected")[0][2] == {"reason": "Disconnected by administrator"}

    summary = client.post(f"/api/rooms/{room['id']}/disconnect-all").json()
    assert summary == {"totalSockets": 1, "disconnectedCount": 1, "failedCount": 0}
    assert client.get(f"/api/rooms/{room['id']}").json()["status"] == "closed"


def test_database_down_is_503(client, services):
    services.gateway.fail = True
    response = client.get("/api/rooms")
    assert response.status_code == 503
    assert response.json() == {"error": "Database not available"}


# --- MESSAGES / WEBHOOK ---

def test_webhook_then_timeline(client, store, sample_wati_payload):
    room = create_room(client, phone=sample_wati_payload["waId"])

    with patch("roombridge.modules.messages.api.webhook_endpoints.settings") as mock_settings:
        mock_settings.WATI_WEBHOOK_ALLOWED_IPS = ""
        mock_settings.WATI_WEBHOOK_SECRET = "s3cret"

        response = client.post("/api/webhook/webhook-wati", json=sample_wati_payload)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized webhook request"}

        for headers in ({"Authorization": "Bearer wrong"}, {"X-Webhook-Secret": "s3cre"}):
            response = client.post("/api/webhook/webhook-wati", json=sample_wati_payload, headers=headers)
            assert response.status_code == 401
        assert store.wati_messages == {}

        response = client.post(
            "/api/webhook/webhook-wati",
            json={**sample_wati_payload, "id": "wamid.header"},
            headers={"X-Webhook-Secret": "s3cret"},
        )
        assert response.status_code == 200

        response = client.post(
            "/api/webhook/webhook-wati",
            json=sample_wati_payload,
            headers={"Authorization": "Bearer s3cret"},
        )
        assert response.status_code == 200
        assert response.json()["roomId"] == room["id"]

    timeline = client.get(f"/api/messages/{room['id']}").json()
    assert sorted(e["id"] for e in timeline) == sorted([sample_wati_payload["id"], "wamid.header"])
    assert {e["source"] for e in timeline} == {"whatsapp"}


def test_webhook_rejects_invalid_json(client):
    with patch("roombridge.modules.messages.api.webhook_endpoints.settings") as mock_settings:
        mock_settings.WATI_WEBHOOK_ALLOWED_IPS = ""
        mock_settings.WATI_WEBHOOK_SECRET = ""
        response = client.post(
            "/api/webhook/webhook-wati",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON payload"}


def test_webhook_ip_whitelist(client, sample_wati_payload):
    with patch("roombridge.modules.messages.api.webhook_endpoints.settings") as mock_settings:
        mock_settings.WATI_WEBHOOK_ALLOWED_IPS = "10.0.0.1, 10.0.0.2"
        mock_settings.WATI_WEBHOOK_SECRET = ""

        blocked = client.post("/api/webhook/webhook-wati", json=sample_wati_payload)
        allowed = client.post(
            "/api/webhook/webhook-wati",
            json=sample_wati_payload,
            headers={"X-Forwarded-For": "10.0.0.2"},
        )

    assert blocked.status_code == 401
    assert allowed.status_code == 200


def test_room_link_get_or_create(client):
    first = client.get("/api/webhook", params={"phone": "+5491100"}).json()
    second = client.get("/api/webhook", params={"phone": "+5491100"}).json()

    assert first["created"] is True
    assert second["created"] is False
    assert second["id"] == first["id"]
    assert first["channel"] == "whatsapp"
    assert first["link"].endswith(f"/chat/{first['id']}?phone=+5491100")


# --- CONTACTS / RESPONSES / SETTINGS / USERS ---

def test_contact_endpoints(client):
    room = create_room(client)

    response = client.post("/api/contact", json={"phone": "+54911", "username": "ana", "source": "web"})
    assert response.status_code == 201
    body = response.json()
    assert body["updates"]["roomsUpdated"] == 1

    contact_id = body["contact"]["id"]
    assert client.get(f"/api/contact/{contact_id}").json()["username"] == "ana"
    assert client.get(f"/api/rooms/{room['id']}").json()["contactId"] == contact_id

    updated = client.put(f"/api/contact/{contact_id}", json={"username": "ana maria"}).json()
    assert updated["contact"]["username"] == "ana maria"

    duplicate = client.post("/api/contact", json={"phone": "+54911", "username": "x", "source": "web"})
    assert duplicate.status_code == 409


def test_response_endpoints(client):
    response = client.post("/api/responses", json={"atajo": "/hola", "type": "text", "text": "Hola!"})
    assert response.status_code == 201

    invalid = client.post("/api/responses", json={"atajo": "/x", "type": "video", "text": "x"})
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid type. Must be one of: text, image, mixed"}

    assert [r["atajo"] for r in client.get("/api/responses").json()] == ["/hola"]


def test_settings_endpoints(client):
    assert client.get("/api/settings").status_code == 404

    response = client.post("/api/settings", json={
        "displayName": "Tienda",
        "description": "Atencion al cliente",
        "welcomeMessage": "Hola!",
        "timestamp": 1700000000000,
    })
    assert response.status_code == 200
    assert response.json()["timestamp"] == "1700000000000"
    assert client.get("/api/settings").json()["displayName"] == "Tienda"


def test_users_endpoint(client):
    create_room(client)
    users = client.get("/api/users").json()
    assert [u["phone"] for u in users] == ["+54911"]
    assert users[0]["isConnected"] is False
