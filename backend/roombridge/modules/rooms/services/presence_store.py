"""
Presence Store

Per-room view of {status, connectedSockets, openedAt, closedAt}. Thin facade
over the room repository's atomic primitives; the database row is the single
source of truth for membership.
"""
import logging
from typing import Callable, Dict, List, Optional

from roombridge.shared.core.constants import ROOM_STATUS_CLOSED, ROOM_STATUS_OPEN, UNKNOWN_ROLE
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import RoomNotFoundError
from roombridge.shared.utils.time_utils import isoformat_utc, utc_now

logger = logging.getLogger("presence_store")


def effective_status(connected_sockets: Optional[List[str]]) -> str:
    """Status derived from membership; wins over a stale persisted field."""
    return ROOM_STATUS_OPEN if connected_sockets else ROOM_STATUS_CLOSED


def serialize_presence(room_id: str, presence: dict) -> dict:
    sockets = list(presence.get("connected_sockets") or [])
    return {
        "roomId": room_id,
        "status": effective_status(sockets),
        "connectedSockets": sockets,
        "connectedCount": len(sockets),
        "openedAt": isoformat_utc(presence.get("opened_at")),
        "closedAt": isoformat_utc(presence.get("closed_at")),
    }


class PresenceStore:

    def __init__(self, gateway: PersistenceGateway, clock: Callable = utc_now):
        self.gateway = gateway
        self.clock = clock

    async def add_socket(self, room_id: str, socket_id: str) -> dict:
        """Set-add socket_id and ensure the room is open. Idempotent."""
        async with self.gateway.session() as repos:
            presence = await repos.rooms.add_socket(room_id, socket_id, self.clock())
        if presence is None:
            raise RoomNotFoundError(room_id)
        logger.debug(f"Socket {socket_id} added to room {room_id}: {presence['connected_sockets']}")
        return serialize_presence(room_id, presence)

    async def remove_socket(self, room_id: str, socket_id: str) -> Optional[dict]:
        """
        Set-pull socket_id; the room closes in the same statement when the
        set becomes empty. Idempotent. Returns None if the room is gone.
        """
        async with self.gateway.session() as repos:
            presence = await repos.rooms.remove_socket(room_id, socket_id, self.clock())
        if presence is None:
            return None
        if not presence["connected_sockets"]:
            logger.info(f"Room {room_id} closed (last socket {socket_id} left)")
        return serialize_presence(room_id, presence)

    async def read_connections(self, room_id: str) -> dict:
        async with self.gateway.session() as repos:
            presence = await repos.rooms.get_presence(room_id)
        if presence is None:
            raise RoomNotFoundError(room_id)
        return serialize_presence(room_id, presence)

    async def read_connections_with_roles(self, room_id: str) -> dict:
        """
        read_connections() plus, per socket, the phone and role of the user
        bound to it. Sockets without a resolvable user are reported with
        phone=None and role 'unknown'.
        """
        async with self.gateway.session() as repos:
            presence = await repos.rooms.get_presence(room_id)
            if presence is None:
                raise RoomNotFoundError(room_id)
            sockets = list(presence.get("connected_sockets") or [])
            users = await repos.users.get_by_socket_ids(sockets)

        by_socket: Dict[str, dict] = {u["socket_id"]: u for u in users if u.get("socket_id")}
        snapshot = serialize_presence(room_id, presence)
        snapshot["users"] = []
        for socket_id in sockets:
            user = by_socket.get(socket_id) or {}
            snapshot["users"].append({
                "socketId": socket_id,
                "phone": user.get("phone"),
                "role": user.get("role") or UNKNOWN_ROLE,
            })
        return snapshot

    async def rooms_for_socket(self, socket_id: str) -> List[str]:
        async with self.gateway.session() as repos:
            return await repos.rooms.get_room_ids_for_socket(socket_id)

    async def reset(self) -> int:
        """Close every room and empty every socket set."""
        async with self.gateway.session() as repos:
            return await repos.rooms.reset_presence(self.clock())
