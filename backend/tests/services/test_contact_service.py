# backend/tests/services/test_contact_service.py
"""
Contact Service tests, focused on the fan-out to rooms and messages.
"""
import asyncio

import pytest

from roombridge.shared.utils.exceptions import ConflictError, EntityNotFoundError, MissingRequiredFieldError
from roombridge.shared.utils.ids import new_object_id
from tests.fakes import T0, seed_chat_message, seed_room

PHONE = "+54911"


async def seed_conversation(services, chats=4, whatsapp=2):
    room = await seed_room(services.gateway, PHONE)
    for i in range(chats):
        await seed_chat_message(services.gateway, room, f"chat {i}", T0)
    for i in range(whatsapp):
        await services.ingestor.ingest({"waId": PHONE, "id": f"wa-{i}", "text": "hola", "timestamp": "1700000000"})
    return room


def test_create_contact_fans_out(services, store):
    async def test_logic():
        room = await seed_conversation(services)

        result = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})

        contact_id = result["contact"]["id"]
        assert result["updates"] == {"roomsUpdated": 1, "messagesUpdated": 4, "whatsappMessagesUpdated": 2}
        assert "failed" not in result
        assert result["contact"]["notes"] == ""

        assert store.rooms[room["id"]]["contact_id"] == contact_id
        assert store.rooms[room["id"]]["username"] == "ana"
        assert all(m["contact_id"] == contact_id for m in store.chat_messages.values())
        assert all(m["contact_id"] == contact_id for m in store.wati_messages.values())

    asyncio.run(test_logic())


def test_create_contact_requires_fields(services):
    async def test_logic():
        with pytest.raises(MissingRequiredFieldError) as exc:
            await services.contacts.create_contact({"phone": PHONE})
        assert exc.value.fields == ["username", "source"]

    asyncio.run(test_logic())


def test_duplicate_phone_or_username_conflicts(services):
    async def test_logic():
        await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})
        with pytest.raises(ConflictError):
            await services.contacts.create_contact({"phone": PHONE, "username": "other", "source": "web"})
        with pytest.raises(ConflictError):
            await services.contacts.create_contact({"phone": "+1", "username": "ana", "source": "web"})

    asyncio.run(test_logic())


def test_failed_fan_out_step_is_reported(services, store):
    async def test_logic():
        room = await seed_conversation(services)
        store.broken.add("chat_messages.set_contact_by_phone")

        result = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})

        assert result["failed"] == ["messagesUpdated"]
        assert result["updates"] == {"roomsUpdated": 1, "messagesUpdated": 0, "whatsappMessagesUpdated": 2}
        # Earlier and later steps are kept
        assert store.rooms[room["id"]]["contact_id"] == result["contact"]["id"]
        assert all(m["contact_id"] is None for m in store.chat_messages.values())

    asyncio.run(test_logic())


def test_phone_change_rewrites_dependents(services, store):
    async def test_logic():
        room = await seed_conversation(services)
        created = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})

        result = await services.contacts.update_contact(created["contact"]["id"], {"phone": "+54922"})

        assert result["contact"]["phone"] == "+54922"
        assert result["updates"] == {"roomsUpdated": 1, "messagesUpdated": 4, "whatsappMessagesUpdated": 2}
        assert store.rooms[room["id"]]["phone"] == "+54922"
        assert all(m["phone"] == "+54922" for m in store.chat_messages.values())
        assert all(m["phone"] == "+54922" for m in store.wati_messages.values())

    asyncio.run(test_logic())


def test_username_change_only_touches_rooms(services, store):
    async def test_logic():
        room = await seed_conversation(services)
        created = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})

        result = await services.contacts.update_contact(created["contact"]["id"], {"username": "ana maria"})

        assert result["updates"] == {"roomsUpdated": 1, "messagesUpdated": 0, "whatsappMessagesUpdated": 0}
        assert store.rooms[room["id"]]["username"] == "ana maria"

    asyncio.run(test_logic())


def test_tags_change_rewrites_by_contact(services, store):
    async def test_logic():
        room = await seed_conversation(services)
        created = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})

        result = await services.contacts.update_contact(created["contact"]["id"], {"tags": ["vip", " ", "hot"]})

        assert result["contact"]["tags"] == ["vip", "hot"]
        assert result["updates"] == {"roomsUpdated": 1, "messagesUpdated": 4, "whatsappMessagesUpdated": 2}
        assert store.rooms[room["id"]]["tags"] == ["vip", "hot"]
        assert all(m["tags"] == ["vip", "hot"] for m in store.wati_messages.values())

    asyncio.run(test_logic())


def test_update_without_changes(services):
    async def test_logic():
        created = await services.contacts.create_contact({"phone": PHONE, "username": "ana", "source": "web"})
        result = await services.contacts.update_contact(created["contact"]["id"], {"notes": "called back"})

        assert result["contact"]["notes"] == "called back"
        assert result["updates"] == {"roomsUpdated": 0, "messagesUpdated": 0, "whatsappMessagesUpdated": 0}

    asyncio.run(test_logic())


def test_update_unknown_contact(services):
    async def test_logic():
        with pytest.raises(EntityNotFoundError):
            await services.contacts.update_contact(new_object_id(), {"username": "x"})

    asyncio.run(test_logic())


def test_list_contacts_search(services):
    async def test_logic():
        await services.contacts.create_contact({"phone": "+1", "username": "Ana", "source": "web"})
        await services.contacts.create_contact({"phone": "+2", "username": "Bruno", "source": "web"})

        result = await services.contacts.list_contacts(search="ana")

        assert [c["username"] for c in result["contacts"]] == ["Ana"]
        assert result["pagination"]["total"] == 1

    asyncio.run(test_logic())
