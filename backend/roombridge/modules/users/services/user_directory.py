"""
User Directory

Phone-keyed user records and their socket binding. A user holds at most one
active socket; the last connect wins.
"""
import logging
from typing import Callable, List, Optional

from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.time_utils import isoformat_utc, utc_now

logger = logging.getLogger("user_directory")


def serialize_user(user: dict) -> dict:
    return {
        "id": user["id"],
        "phone": user["phone"],
        "role": user.get("role"),
        "rooms": list(user.get("rooms") or []),
        "socketId": user.get("socket_id"),
        "isConnected": bool(user.get("is_connected")),
        "connectedAt": isoformat_utc(user.get("connected_at")),
        "disconnectedAt": isoformat_utc(user.get("disconnected_at")),
        "createdAt": isoformat_utc(user.get("created_at")),
    }


class UserDirectory:

    def __init__(self, gateway: PersistenceGateway, clock: Callable = utc_now):
        self.gateway = gateway
        self.clock = clock

    async def find_or_create_by_phone(self, phone: str) -> dict:
        async with self.gateway.session() as repos:
            return await repos.users.find_or_create_by_phone(phone)

    async def on_connect(self, user_id: str, socket_id: str) -> None:
        """Bind socket_id to the user, replacing any previous binding."""
        async with self.gateway.session() as repos:
            await repos.users.mark_connected(user_id, socket_id, self.clock())
        logger.debug(f"User {user_id} bound to socket {socket_id}")

    async def on_disconnect(self, user_id: str, socket_id: Optional[str] = None) -> bool:
        """
        Mark the user disconnected. Passing socket_id limits this to the case
        where the user is still bound to that socket.
        """
        async with self.gateway.session() as repos:
            return await repos.users.mark_disconnected(user_id, self.clock(), socket_id)

    async def on_disconnect_by_socket(self, socket_id: str) -> Optional[str]:
        """
        Unbind the user currently holding socket_id. A user that has already
        reconnected on another socket is left alone.
        """
        async with self.gateway.session() as repos:
            user_id = await repos.users.mark_disconnected_by_socket(socket_id, self.clock())
        if user_id:
            logger.debug(f"User {user_id} unbound from socket {socket_id}")
        return user_id

    async def bind_room(self, user_id: str, room_id: str) -> None:
        async with self.gateway.session() as repos:
            await repos.users.add_room(user_id, room_id)

    async def list_users(self) -> List[dict]:
        async with self.gateway.session() as repos:
            users = await repos.users.list_users()
        return [serialize_user(u) for u in users]

    async def reset_connections(self) -> int:
        async with self.gateway.session() as repos:
            return await repos.users.reset_connections(self.clock())
