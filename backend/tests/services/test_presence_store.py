# backend/tests/services/test_presence_store.py
import asyncio

import pytest

from roombridge.modules.rooms.services.presence_store import effective_status, serialize_presence
from roombridge.shared.core.constants import ROOM_STATUS_CLOSED, ROOM_STATUS_OPEN
from roombridge.shared.utils.exceptions import RoomNotFoundError
from roombridge.shared.utils.ids import new_object_id
from roombridge.shared.utils.time_utils import isoformat_utc
from tests.fakes import T0, seed_room


def test_effective_status():
    assert effective_status(["s1"]) == ROOM_STATUS_OPEN
    assert effective_status([]) == ROOM_STATUS_CLOSED
    assert effective_status(None) == ROOM_STATUS_CLOSED


def test_serialize_presence_ignores_stale_status():
    """A row still marked open with no sockets is reported closed."""
    snapshot = serialize_presence("r1", {
        "status": ROOM_STATUS_OPEN,
        "connected_sockets": [],
        "opened_at": T0,
        "closed_at": None,
    })
    assert snapshot == {
        "roomId": "r1",
        "status": ROOM_STATUS_CLOSED,
        "connectedSockets": [],
        "connectedCount": 0,
        "openedAt": isoformat_utc(T0),
        "closedAt": None,
    }


def test_add_socket_is_idempotent(services):
    async def test_logic():
        room = await seed_room(services.gateway, "+1")
        await services.presence.add_socket(room["id"], "s1")
        snapshot = await services.presence.add_socket(room["id"], "s1")
        assert snapshot["connectedSockets"] == ["s1"]
        assert snapshot["connectedCount"] == 1

    asyncio.run(test_logic())


def test_add_socket_unknown_room(services):
    async def test_logic():
        with pytest.raises(RoomNotFoundError):
            await services.presence.add_socket(new_object_id(), "s1")

    asyncio.run(test_logic())


def test_remove_socket_from_closed_room_keeps_closed_at(services, store):
    async def test_logic():
        room = await seed_room(services.gateway, "+1")
        services.clock.advance(60)
        snapshot = await services.presence.remove_socket(room["id"], "never-joined")

        assert snapshot["status"] == ROOM_STATUS_CLOSED
        assert snapshot["closedAt"] == isoformat_utc(T0)
        assert store.rooms[room["id"]]["closed_at"] == T0

    asyncio.run(test_logic())


def test_remove_socket_unknown_room_returns_none(services):
    async def test_logic():
        assert await services.presence.remove_socket(new_object_id(), "s1") is None

    asyncio.run(test_logic())


def test_read_connections_unknown_room(services):
    async def test_logic():
        with pytest.raises(RoomNotFoundError):
            await services.presence.read_connections(new_object_id())
        with pytest.raises(RoomNotFoundError):
            await services.presence.read_connections_with_roles(new_object_id())

    asyncio.run(test_logic())


def test_read_connections_with_roles(services):
    async def test_logic():
        room = await seed_room(services.gateway, "+1")
        user = await services.users.find_or_create_by_phone("+1")
        await services.users.on_connect(user["id"], "s1")
        await services.presence.add_socket(room["id"], "s1")
        await services.presence.add_socket(room["id"], "orphan")

        snapshot = await services.presence.read_connections_with_roles(room["id"])

        assert snapshot["connectedCount"] == 2
        assert snapshot["users"] == [
            {"socketId": "s1", "phone": "+1", "role": "user"},
            {"socketId": "orphan", "phone": None, "role": "unknown"},
        ]

    asyncio.run(test_logic())


def test_rooms_for_socket(services):
    async def test_logic():
        first = await seed_room(services.gateway, "+1")
        second = await seed_room(services.gateway, "+2")
        await services.presence.add_socket(first["id"], "s1")
        await services.presence.add_socket(second["id"], "s2")

        assert await services.presence.rooms_for_socket("s1") == [first["id"]]
        assert await services.presence.rooms_for_socket("nobody") == []

    asyncio.run(test_logic())
