"""
Broadcast Bus

Fan-out of server events to every socket joined to a room, plus directed
events to a single socket. Wraps the Socket.IO server so the services never
touch transport details.
"""
import logging

import socketio

from roombridge.shared.core.constants import (
    EVENT_CHAT_MESSAGE,
    EVENT_DISCONNECTED,
    EVENT_ERROR,
    EVENT_ROOM_USERS,
    EVENT_WARNING,
)

logger = logging.getLogger("broadcast_bus")

DEFAULT_NAMESPACE = "/"


class BroadcastBus:

    def __init__(self, sio: socketio.AsyncServer):
        self.sio = sio

    # ============================================
    # ROOM MEMBERSHIP (transport level)
    # ============================================

    async def join(self, socket_id: str, room_id: str) -> None:
        await self.sio.enter_room(socket_id, room_id)

    async def leave(self, socket_id: str, room_id: str) -> None:
        await self.sio.leave_room(socket_id, room_id)

    def is_connected(self, socket_id: str) -> bool:
        return self.sio.manager.is_connected(socket_id, DEFAULT_NAMESPACE)

    # ============================================
    # ROOM BROADCASTS
    # ============================================

    async def emit_chat_message(self, room_id: str, payload: dict) -> None:
        await self.sio.emit(EVENT_CHAT_MESSAGE, payload, to=room_id)

    async def emit_room_users(self, room_id: str, snapshot: dict) -> None:
        await self.sio.emit(EVENT_ROOM_USERS, snapshot, to=room_id)

    # ============================================
    # DIRECTED EVENTS
    # ============================================

    async def send_to_socket(self, socket_id: str, event: str, data) -> None:
        await self.sio.emit(event, data, to=socket_id)

    async def send_error(self, socket_id: str, reason: str) -> None:
        await self.send_to_socket(socket_id, EVENT_ERROR, reason)

    async def send_warning(self, socket_id: str, reason: str) -> None:
        await self.send_to_socket(socket_id, EVENT_WARNING, reason)

    async def force_close(self, socket_id: str, reason: str) -> bool:
        """
        Tell the socket why it is being dropped, then terminate it.
        Returns False if the socket was no longer connected.
        """
        if not self.is_connected(socket_id):
            logger.info(f"Socket {socket_id} already gone, nothing to close")
            return False
        await self.send_to_socket(socket_id, EVENT_DISCONNECTED, {"reason": reason})
        await self.sio.disconnect(socket_id)
        logger.info(f"Socket {socket_id} force-closed: {reason}")
        return True
