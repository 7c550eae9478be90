# backend/tests/services/test_user_directory.py
import asyncio

from roombridge.shared.utils.time_utils import isoformat_utc


def test_find_or_create_is_keyed_by_phone(services, store):
    async def test_logic():
        first = await services.users.find_or_create_by_phone("+1")
        again = await services.users.find_or_create_by_phone("+1")

        assert first["id"] == again["id"]
        assert first["role"] == "user"
        assert first["rooms"] == []
        assert len(store.users) == 1

    asyncio.run(test_logic())


def test_connect_and_disconnect(services, store):
    async def test_logic():
        user = await services.users.find_or_create_by_phone("+1")

        connected_at = services.clock.advance()
        await services.users.on_connect(user["id"], "s1")
        row = store.users[user["id"]]
        assert (row["socket_id"], row["is_connected"], row["connected_at"]) == ("s1", True, connected_at)

        disconnected_at = services.clock.advance()
        await services.users.on_disconnect(user["id"])
        row = store.users[user["id"]]
        assert (row["socket_id"], row["is_connected"], row["disconnected_at"]) == (None, False, disconnected_at)

        # Reconnect clears the disconnect time
        await services.users.on_connect(user["id"], "s2")
        assert store.users[user["id"]]["disconnected_at"] is None

    asyncio.run(test_logic())


def test_stale_socket_does_not_unbind_reconnected_user(services, store):
    async def test_logic():
        user = await services.users.find_or_create_by_phone("+1")
        await services.users.on_connect(user["id"], "old")
        await services.users.on_connect(user["id"], "new")

        assert await services.users.on_disconnect_by_socket("old") is None
        assert store.users[user["id"]]["socket_id"] == "new"
        assert await services.users.on_disconnect_by_socket("new") == user["id"]

    asyncio.run(test_logic())


def test_disconnect_guarded_by_socket_leaves_new_binding(services, store):
    async def test_logic():
        user = await services.users.find_or_create_by_phone("+1")
        await services.users.on_connect(user["id"], "new")

        assert await services.users.on_disconnect(user["id"], "old") is False
        assert store.users[user["id"]]["socket_id"] == "new"

        assert await services.users.on_disconnect(user["id"], "new") is True
        assert store.users[user["id"]]["is_connected"] is False

    asyncio.run(test_logic())


def test_bind_room_has_set_semantics(services, store):
    async def test_logic():
        user = await services.users.find_or_create_by_phone("+1")
        await services.users.bind_room(user["id"], "r1")
        await services.users.bind_room(user["id"], "r1")
        assert store.users[user["id"]]["rooms"] == ["r1"]

    asyncio.run(test_logic())


def test_list_users_serializes(services):
    async def test_logic():
        user = await services.users.find_or_create_by_phone("+1")
        await services.users.on_connect(user["id"], "s1")

        [listed] = await services.users.list_users()
        assert listed["socketId"] == "s1"
        assert listed["isConnected"] is True
        assert listed["connectedAt"] == isoformat_utc(services.clock())

    asyncio.run(test_logic())
