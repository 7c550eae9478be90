"""
Message Pipeline

Socket-originated chat messages in, merged room timeline out.

- handle_socket_message(): persist then broadcast; when the database is
  unreachable the message is broadcast anyway under a local id and the
  sender is warned that it was not saved
- read_timeline(): chat messages and WhatsApp messages of a room projected to
  one shape, sorted by timestamp (chat before whatsapp on ties, then id),
  and only then paginated
"""
import logging
from typing import Any, Callable, Dict, List

from roombridge.shared.core.constants import (
    ANONYMOUS_USERNAME_PREFIX,
    ANONYMOUS_USERNAME_SID_CHARS,
    DEFAULT_MESSAGE_TYPE,
    DEFAULT_MESSAGES_PAGE_SIZE,
    JOIN_HISTORY_LIMIT,
    MAX_PAGE_SIZE,
    SOURCE_CHAT,
    SOURCE_WHATSAPP,
)
from roombridge.shared.db.gateway import PersistenceGateway, Repositories
from roombridge.shared.utils.exceptions import (
    MissingRequiredFieldError,
    PersistenceUnavailableError,
    RoomNotFoundError,
)
from roombridge.shared.utils.ids import LocalMessageIdGenerator, local_message_ids
from roombridge.shared.utils.time_utils import isoformat_utc, parse_timestamp, to_epoch_ms, utc_now

logger = logging.getLogger("message_pipeline")

NOT_SAVED_WARNING = "Message sent locally - not saved to database"

_SOURCE_RANK = {SOURCE_CHAT: 0, SOURCE_WHATSAPP: 1}


# ============================================
# PROJECTIONS
# ============================================

def serialize_chat_message(message: dict) -> dict:
    """Broadcast shape of a chat message (persisted or local)."""
    return {
        "id": message["id"],
        "roomId": message["room_id"],
        "content": message["content"],
        "timestamp": isoformat_utc(message["timestamp"]),
        "socketId": message.get("socket_id"),
        "username": message["username"],
        "type": message.get("type") or DEFAULT_MESSAGE_TYPE,
        "welcome": message.get("welcome"),
        "read": bool(message.get("read")),
        "source": SOURCE_CHAT,
        "phone": message.get("phone"),
    }


def timeline_entry_to_broadcast(entry: dict, room_id: str) -> dict:
    """
    `chat-message` shape of a timeline entry: same keys and ISO timestamp as
    serialize_chat_message(), plus the WhatsApp ids for whatsapp entries.
    """
    payload = {
        "id": entry["id"],
        "roomId": room_id,
        "content": entry["content"],
        "timestamp": isoformat_utc(parse_timestamp(entry.get("timestamp"))),
        "socketId": entry.get("socketId"),
        "username": entry.get("username"),
        "type": entry.get("type") or DEFAULT_MESSAGE_TYPE,
        "welcome": entry.get("welcome"),
        "read": bool(entry.get("read")),
        "source": entry["source"],
        "phone": entry.get("phone"),
    }
    if entry["source"] == SOURCE_WHATSAPP:
        payload["conversationId"] = entry.get("conversationId")
        payload["ticketId"] = entry.get("ticketId")
    return payload


def chat_to_timeline_entry(message: dict) -> dict:
    entry = {
        "id": message["id"],
        "content": message["content"],
        "timestamp": to_epoch_ms(message.get("timestamp")),
        "username": message.get("username"),
        "type": message.get("type") or DEFAULT_MESSAGE_TYPE,
        "source": SOURCE_CHAT,
        "socketId": message.get("socket_id"),
        "welcome": message.get("welcome"),
        "read": bool(message.get("read")),
    }
    if message.get("phone"):
        entry["phone"] = message["phone"]
    return entry


def wati_to_timeline_entry(message: dict) -> dict:
    return {
        "id": message["message_id"],
        "content": message.get("message") or "",
        "timestamp": to_epoch_ms(message.get("date")),
        "username": message.get("username"),
        "type": message.get("type_message") or DEFAULT_MESSAGE_TYPE,
        "source": SOURCE_WHATSAPP,
        "phone": message.get("phone"),
        "conversationId": message.get("conversation_id"),
        "ticketId": message.get("ticket_id"),
    }


def timeline_sort_key(entry: dict):
    """Ascending timestamp; chat before whatsapp on ties; then id."""
    timestamp = entry.get("timestamp")
    return (
        timestamp if timestamp is not None else 0,
        _SOURCE_RANK.get(entry.get("source"), len(_SOURCE_RANK)),
        str(entry.get("id")),
    )


async def count_room_messages(repos: Repositories, room: dict) -> int:
    """Chat messages counted by room id, WhatsApp messages by the room's phone."""
    chat_count = await repos.chat_messages.count_for_room(room["id"])
    wati_count = await repos.wati_messages.count_for_phone(room["phone"])
    return chat_count + wati_count


def _clamp_pagination(page: int, limit: int):
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_MESSAGES_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit


class MessagePipeline:

    def __init__(
        self,
        gateway: PersistenceGateway,
        bus,
        clock: Callable = utc_now,
        id_generator: LocalMessageIdGenerator = local_message_ids,
    ):
        self.gateway = gateway
        self.bus = bus
        self.clock = clock
        self.id_generator = id_generator

    # ============================================
    # SOCKET INGRESS
    # ============================================

    def _build_message(self, socket_id: str, data: Dict[str, Any]) -> dict:
        if not isinstance(data, dict):
            raise MissingRequiredFieldError(["roomId", "message"])
        missing = [f for f in ("roomId", "message") if data.get(f) in (None, "")]
        if missing:
            raise MissingRequiredFieldError(missing)

        return {
            "room_id": data["roomId"],
            "content": str(data["message"]),
            "username": data.get("username") or f"{ANONYMOUS_USERNAME_PREFIX}{socket_id[:ANONYMOUS_USERNAME_SID_CHARS]}",
            "type": data.get("type") or DEFAULT_MESSAGE_TYPE,
            "welcome": data.get("welcome"),
            "read": bool(data.get("read") or False),
            "socket_id": socket_id,
            "timestamp": self.clock(),
        }

    async def handle_socket_message(self, socket_id: str, data: Dict[str, Any]) -> dict:
        """
        Persist a `chat-message` from socket_id and broadcast it to the room.

        Raises:
            MissingRequiredFieldError: roomId or message missing
            RoomNotFoundError: no such room (nothing is broadcast)

        Returns the broadcast payload.
        """
        message = self._build_message(socket_id, data)
        room_id = message["room_id"]

        try:
            async with self.gateway.session() as repos:
                room = await repos.rooms.get_by_id(room_id)
                if room is None:
                    raise RoomNotFoundError(room_id)
                saved = await repos.chat_messages.create_message({
                    **message,
                    "phone": room.get("phone"),
                    "contact_id": room.get("contact_id"),
                    "tags": list(room.get("tags") or []),
                })
        except PersistenceUnavailableError:
            return await self._broadcast_locally(socket_id, message)

        payload = serialize_chat_message(saved)
        await self.bus.emit_chat_message(room_id, payload)
        logger.info(f"Message {saved['id']} from socket {socket_id} stored in room {room_id}")
        return payload

    async def _broadcast_locally(self, socket_id: str, message: dict) -> dict:
        """Degraded path: echo to the room without persisting, warn the sender."""
        local_id = self.id_generator.next_id()
        payload = serialize_chat_message({**message, "id": local_id})
        logger.warning(f"Database unavailable, broadcasting message {local_id} in room {message['room_id']} unsaved")
        await self.bus.emit_chat_message(message["room_id"], payload)
        await self.bus.send_warning(socket_id, NOT_SAVED_WARNING)
        return payload

    # ============================================
    # TIMELINE
    # ============================================

    async def read_timeline(
        self,
        room_id: str,
        page: int = 1,
        limit: int = DEFAULT_MESSAGES_PAGE_SIZE
    ) -> List[dict]:
        """Merged, ordered timeline page of a room. Raises RoomNotFoundError."""
        page, limit = _clamp_pagination(page, limit)

        async with self.gateway.session() as repos:
            room = await repos.rooms.get_by_id(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            chat_messages = await repos.chat_messages.get_for_room(room_id)
            wati_messages = await repos.wati_messages.get_for_room(room_id, phone=room.get("phone"))

        entries = [chat_to_timeline_entry(m) for m in chat_messages]
        entries.extend(wati_to_timeline_entry(m) for m in wati_messages)
        entries.sort(key=timeline_sort_key)

        skip = (page - 1) * limit
        return entries[skip:skip + limit]

    async def read_history(self, room_id: str, limit: int = JOIN_HISTORY_LIMIT) -> List[dict]:
        """First timeline page as `chat-message` payloads, for replay on join."""
        entries = await self.read_timeline(room_id, page=1, limit=limit)
        return [timeline_entry_to_broadcast(entry, room_id) for entry in entries]

    async def message_count(self, room_id: str) -> int:
        async with self.gateway.session() as repos:
            room = await repos.rooms.get_by_id(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            return await count_room_messages(repos, room)
