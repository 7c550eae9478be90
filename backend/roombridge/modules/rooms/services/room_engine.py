"""
Room Engine

Owns room membership: join, leave, forced disconnects and the disconnect
sweep for dropped sockets. Every membership change ends with a `room-users`
snapshot broadcast to the room.

Key patterns:
- the socket set is only ever changed through the Presence Store's atomic
  add/pull primitives; the open/closed transition travels in the same
  statement, so a room is open iff it has sockets after every commit
- user binding goes through the User Directory by socket id, so a user that
  already reconnected elsewhere is not unbound by a stale socket
"""
import asyncio
import logging
from typing import List, Optional

from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.users.services.user_directory import UserDirectory
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import RoomNotFoundError

logger = logging.getLogger("room_engine")

NO_USER_NOTE = "No user was bound to this socket; only room membership was cleared"


class RoomEngine:

    def __init__(
        self,
        gateway: PersistenceGateway,
        presence: PresenceStore,
        users: UserDirectory,
        bus,
    ):
        self.gateway = gateway
        self.presence = presence
        self.users = users
        self.bus = bus

    async def _broadcast_room_users(self, room_id: str) -> Optional[dict]:
        """Snapshot the room with roles and push it to every joined socket."""
        try:
            snapshot = await self.presence.read_connections_with_roles(room_id)
        except RoomNotFoundError:
            # Room deleted while sockets were still leaving
            return None
        await self.bus.emit_room_users(room_id, snapshot)
        return snapshot

    # ============================================
    # JOIN / LEAVE
    # ============================================

    async def join_room(self, socket_id: str, room_id: str) -> dict:
        """
        Add socket_id to the room, bind it to the room's user and broadcast
        the new membership.

        Raises:
            RoomNotFoundError: no such room
            PersistenceUnavailableError: database down (caller warns the socket)
        """
        async with self.gateway.session() as repos:
            room = await repos.rooms.get_by_id(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)

        user = await self.users.find_or_create_by_phone(room["phone"])
        await self.users.on_connect(user["id"], socket_id)
        await self.presence.add_socket(room_id, socket_id)

        if not self.bus.is_connected(socket_id):
            # Transport closed mid-join; its disconnect sweep may already have run
            await self.users.on_disconnect(user["id"], socket_id)
            presence = await self.presence.remove_socket(room_id, socket_id)
            logger.info(f"Socket {socket_id} disconnected while joining room {room_id}, membership undone")
            return {"ok": False, "roomId": room_id, "userId": user["id"], "presence": presence}

        snapshot = await self._broadcast_room_users(room_id)
        logger.info(f"Socket {socket_id} joined room {room_id} as user {user['id']}")
        return {"ok": True, "roomId": room_id, "userId": user["id"], "presence": snapshot}

    async def leave_room(self, socket_id: str, room_id: str) -> dict:
        await self.users.on_disconnect_by_socket(socket_id)
        presence = await self.presence.remove_socket(room_id, socket_id)
        snapshot = await self._broadcast_room_users(room_id)
        logger.info(f"Socket {socket_id} left room {room_id}")
        return {"ok": True, "roomId": room_id, "presence": snapshot or presence}

    # ============================================
    # FORCED DISCONNECTS
    # ============================================

    async def force_disconnect(self, room_id: str, socket_id: str, reason: str) -> dict:
        """
        leave_room() for a socket chosen by an operator, plus a `disconnected`
        notice to that socket and the close of its transport session.
        """
        presence = await self.presence.remove_socket(room_id, socket_id)
        if presence is None:
            raise RoomNotFoundError(room_id)
        user_id = await self.users.on_disconnect_by_socket(socket_id)

        closed = await self.bus.force_close(socket_id, reason)
        snapshot = await self._broadcast_room_users(room_id) or presence

        result = {
            "ok": True,
            "socketId": socket_id,
            "remaining": snapshot["connectedCount"],
            "userUnbound": user_id is not None,
            "transportClosed": closed,
        }
        if user_id is None:
            result["note"] = NO_USER_NOTE
        logger.info(
            f"Force-disconnected socket {socket_id} from room {room_id} "
            f"(reason={reason}, remaining={result['remaining']})"
        )
        return result

    async def disconnect_all(self, room_id: str, reason: str) -> dict:
        """Force-disconnect every socket currently in the room, concurrently."""
        snapshot = await self.presence.read_connections(room_id)
        sockets: List[str] = snapshot["connectedSockets"]

        results = await asyncio.gather(
            *(self.force_disconnect(room_id, socket_id, reason) for socket_id in sockets),
            return_exceptions=True,
        )

        failed = 0
        for socket_id, outcome in zip(sockets, results):
            if isinstance(outcome, BaseException):
                failed += 1
                logger.error(f"Failed to disconnect socket {socket_id} from room {room_id}: {outcome}")

        summary = {
            "totalSockets": len(sockets),
            "disconnectedCount": len(sockets) - failed,
            "failedCount": failed,
        }
        logger.info(f"Disconnect-all on room {room_id}: {summary}")
        return summary

    # ============================================
    # TRANSPORT DISCONNECT SWEEP
    # ============================================

    async def handle_disconnect(self, socket_id: str) -> List[str]:
        """
        Called when a socket's transport session ends. Leaves every room that
        still lists the socket. Returns the ids of those rooms.
        """
        room_ids = await self.presence.rooms_for_socket(socket_id)
        for room_id in room_ids:
            await self.leave_room(socket_id, room_id)

        if not room_ids:
            # Never joined (or already swept): only the user binding may remain
            await self.users.on_disconnect_by_socket(socket_id)

        logger.info(f"Socket {socket_id} disconnected, left rooms {room_ids}")
        return room_ids

    async def reset_presence(self) -> dict:
        """Forget every socket. Only valid while no socket is connected (e.g. at startup)."""
        rooms_closed = await self.presence.reset()
        users_disconnected = await self.users.reset_connections()
        logger.warning(f"Presence reset: {rooms_closed} rooms closed, {users_disconnected} users disconnected")
        return {"roomsClosed": rooms_closed, "usersDisconnected": users_disconnected}
