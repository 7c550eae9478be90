# backend/tests/services/test_webhook_ingestor.py
import asyncio

import pytest

from roombridge.modules.messages.services.webhook_ingestor import WatiWebhookIngestor, parse_wati_payload
from roombridge.shared.core.constants import EVENT_CHAT_MESSAGE
from roombridge.shared.utils.exceptions import MissingRequiredFieldError
from tests.fakes import seed_room


def test_parse_wati_payload(sample_wati_payload):
    values = parse_wati_payload(sample_wati_payload)
    assert values == {
        "message_id": sample_wati_payload["id"],
        "conversation_id": "conv-1",
        "ticket_id": "ticket-1",
        "phone": "5491155550000",
        "username": "Maria",
        "message": "Hola, quiero info",
        "type_message": "text",
        "date": "2023-11-14T19:13:20.000",
    }


def test_parse_wati_payload_requires_sender_and_id():
    with pytest.raises(MissingRequiredFieldError) as exc:
        parse_wati_payload({"text": "hi"})
    assert exc.value.fields == ["waId", "id"]


def test_message_binds_to_room_by_phone(services, store, sample_wati_payload):
    async def test_logic():
        room = await seed_room(services.gateway, "5491155550000", contact_id="c" * 24, tags=["lead"])

        result = await services.ingestor.ingest(sample_wati_payload)

        assert result["success"] is True
        assert result["duplicate"] is False
        assert result["roomId"] == room["id"]
        assert result["message"]["source"] == "whatsapp"

        stored = next(iter(store.wati_messages.values()))
        assert stored["room_id"] == room["id"]
        assert stored["contact_id"] == "c" * 24
        assert stored["tags"] == ["lead"]
        # Not broadcast unless enabled
        assert services.bus.events == []

    asyncio.run(test_logic())


def test_message_without_room_is_stored_unbound(services, store, sample_wati_payload):
    async def test_logic():
        result = await services.ingestor.ingest(sample_wati_payload)
        assert result["roomId"] is None
        assert next(iter(store.wati_messages.values()))["room_id"] is None

    asyncio.run(test_logic())


def test_redelivery_is_idempotent(services, store, sample_wati_payload):
    async def test_logic():
        await services.ingestor.ingest(sample_wati_payload)
        result = await services.ingestor.ingest(sample_wati_payload)

        assert result["duplicate"] is True
        assert len(store.wati_messages) == 1

    asyncio.run(test_logic())


def test_non_message_events_are_ignored(services, store, sample_wati_payload):
    async def test_logic():
        result = await services.ingestor.ingest({**sample_wati_payload, "eventType": "sessionMessageSent"})
        assert result == {"success": True, "ignored": True, "eventType": "sessionMessageSent"}
        assert store.wati_messages == {}

    asyncio.run(test_logic())


def test_optional_broadcast_of_inbound_messages(gateway, bus, sample_wati_payload):
    async def test_logic():
        room = await seed_room(gateway, "5491155550000")
        ingestor = WatiWebhookIngestor(gateway, bus, broadcast_inbound=True)

        await ingestor.ingest(sample_wati_payload)
        await ingestor.ingest(sample_wati_payload)

        events = bus.of(EVENT_CHAT_MESSAGE)
        assert len(events) == 1
        assert events[0][1] == room["id"]
        assert events[0][2]["roomId"] == room["id"]
        assert events[0][2]["id"] == sample_wati_payload["id"]

    asyncio.run(test_logic())
