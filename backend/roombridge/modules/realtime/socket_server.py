"""
Socket.IO Server

Transport entry point for browser clients. Events in:
- join-room(roomId)
- chat-message({roomId, message, username, type?, welcome?, read?})
- disconnect

Handlers never raise into the transport: missing rooms become an `error`
event to the sender, database outages become a `warning` and the chat keeps
working without persistence.
"""
import logging
from typing import Optional

import socketio

from roombridge.modules.messages.services.message_pipeline import MessagePipeline
from roombridge.modules.realtime.broadcast_bus import BroadcastBus
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.shared.core.config import settings
from roombridge.shared.core.constants import (
    EVENT_CHAT_MESSAGE,
    EVENT_JOIN_ROOM,
)
from roombridge.shared.core.logging import set_socket_correlation_id
from roombridge.shared.utils.exceptions import (
    ChatBackendError,
    MissingRequiredFieldError,
    PersistenceUnavailableError,
    RoomNotFoundError,
)

logger = logging.getLogger("socket_server")

DB_UNAVAILABLE_WARNING = "Database not available - messages won't be saved"


def create_socket_server() -> socketio.AsyncServer:
    """
    Events of one socket are handled one after another (async_handlers=False)
    so a client's join always completes before its first message.
    """
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.allowed_origins,
        ping_interval=settings.SOCKET_PING_INTERVAL,
        ping_timeout=settings.SOCKET_PING_TIMEOUT,
        transports=["polling", "websocket"],
        async_handlers=False,
        logger=False,
        engineio_logger=False,
    )


class ChatSocketHandlers:

    def __init__(self, engine: RoomEngine, pipeline: MessagePipeline, bus: BroadcastBus):
        self.engine = engine
        self.pipeline = pipeline
        self.bus = bus

    def register(self, sio: socketio.AsyncServer) -> None:
        sio.on("connect", self.on_connect)
        sio.on(EVENT_JOIN_ROOM, self.on_join_room)
        sio.on(EVENT_CHAT_MESSAGE, self.on_chat_message)
        sio.on("disconnect", self.on_disconnect)

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None):
        set_socket_correlation_id(sid)
        logger.info(f"Socket connected: {sid} from {environ.get('REMOTE_ADDR', 'unknown')}")

    async def on_join_room(self, sid: str, room_id):
        set_socket_correlation_id(sid)
        if not room_id or not isinstance(room_id, str):
            await self.bus.send_error(sid, "Room ID is required")
            return

        # Transport-level membership first: the socket receives room broadcasts
        # even if the database is down
        await self.bus.join(sid, room_id)

        try:
            joined = await self.engine.join_room(sid, room_id)
            if not joined["ok"]:
                return
            history = await self.pipeline.read_history(room_id)
        except RoomNotFoundError:
            await self.bus.leave(sid, room_id)
            await self.bus.send_error(sid, "Room not found")
            return
        except PersistenceUnavailableError:
            logger.warning(f"Socket {sid} joined room {room_id} without persistence")
            await self.bus.send_warning(sid, DB_UNAVAILABLE_WARNING)
            return
        except ChatBackendError as e:
            logger.error(f"Join of room {room_id} by {sid} failed: {e.message}")
            await self.bus.send_error(sid, e.message)
            return

        for entry in history:
            await self.bus.send_to_socket(sid, EVENT_CHAT_MESSAGE, entry)
        logger.debug(f"Replayed {len(history)} timeline entries to {sid}")

    async def on_chat_message(self, sid: str, data):
        set_socket_correlation_id(sid)
        try:
            await self.pipeline.handle_socket_message(sid, data)
        except RoomNotFoundError:
            await self.bus.send_error(sid, "Room not found")
        except MissingRequiredFieldError as e:
            await self.bus.send_error(sid, e.message)
        except ChatBackendError as e:
            logger.error(f"Message from {sid} failed: {e.message}")
            await self.bus.send_error(sid, "Failed to send message")

    async def on_disconnect(self, sid: str, reason=None):
        set_socket_correlation_id(sid)
        try:
            rooms = await self.engine.handle_disconnect(sid)
        except PersistenceUnavailableError:
            logger.warning(f"Socket {sid} disconnected while the database was unavailable; presence not updated")
            return
        except ChatBackendError as e:
            logger.error(f"Disconnect sweep for {sid} failed: {e.message}")
            return
        logger.info(f"Socket disconnected: {sid} (reason={reason}, rooms={rooms})")
