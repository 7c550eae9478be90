"""
Room Service
Room lifecycle outside of presence: creation (API or webhook link), listing,
detail and deletion.
"""
import logging
from typing import Callable, Optional

from roombridge.modules.messages.services.message_pipeline import count_room_messages
from roombridge.modules.rooms.services.presence_store import effective_status
from roombridge.modules.users.services.user_directory import UserDirectory
from roombridge.shared.core.config import settings
from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ROOM_STATUS_OPEN
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import ConflictError, MissingRequiredFieldError, RoomNotFoundError
from roombridge.shared.utils.ids import require_object_id
from roombridge.shared.utils.time_utils import isoformat_utc, utc_now

logger = logging.getLogger("room_service")

ROOM_API_VERSION = "v1"


def serialize_room(room: dict, message_count: Optional[int] = None) -> dict:
    sockets = list(room.get("connected_sockets") or [])
    data = {
        "id": room["id"],
        "name": room["name"],
        "phone": room["phone"],
        "channel": room["channel"],
        "source": room["source"],
        "createdFrom": room.get("created_from"),
        "metadata": room.get("room_metadata") or {},
        "status": effective_status(sockets),
        "connectedSockets": sockets,
        "connectedCount": len(sockets),
        "openedAt": isoformat_utc(room.get("opened_at")),
        "closedAt": isoformat_utc(room.get("closed_at")),
        "username": room.get("username"),
        "contactId": room.get("contact_id"),
        "tags": list(room.get("tags") or []),
        "createdAt": isoformat_utc(room.get("created_at")),
    }
    if message_count is not None:
        data["messageCount"] = message_count
    return data


class RoomService:

    def __init__(self, gateway: PersistenceGateway, users: UserDirectory, clock: Callable = utc_now):
        self.gateway = gateway
        self.users = users
        self.clock = clock

    # ============================================
    # CREATE
    # ============================================

    async def create_room(
        self,
        phone: str,
        channel: str,
        source: str,
        name: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        created_from: str = "api",
    ) -> dict:
        """
        Create the room for a phone. A phone owns at most one room.

        Raises:
            MissingRequiredFieldError: phone, channel or source empty
            ConflictError: the phone already has a room
        """
        missing = [f for f, v in (("phone", phone), ("channel", channel), ("source", source)) if not v]
        if missing:
            raise MissingRequiredFieldError(missing)

        now = self.clock()
        millis = int(now.timestamp() * 1000)
        room_data = {
            "name": name or f"Chat-{phone}-{channel}-{millis}",
            "phone": phone,
            "channel": channel,
            "source": source,
            "created_from": created_from,
            "room_metadata": {
                "userAgent": user_agent,
                "ipAddress": ip_address,
                "timestamp": isoformat_utc(now),
                "apiVersion": ROOM_API_VERSION,
            },
            "status": ROOM_STATUS_OPEN,
            "connected_sockets": [],
            "opened_at": now,
        }

        async with self.gateway.session() as repos:
            if await repos.rooms.get_by_phone(phone):
                raise ConflictError("A room already exists for this phone")
            # Contact created before the room: carry its link over
            contact = await repos.contacts.get_by_phone(phone)
            if contact:
                room_data["contact_id"] = contact["id"]
                room_data["username"] = contact["username"]
                room_data["tags"] = list(contact.get("tags") or [])
            room = await repos.rooms.create_room(room_data)
            bound = await repos.wati_messages.bind_orphans(phone, room["id"])

        user = await self.users.find_or_create_by_phone(phone)
        await self.users.bind_room(user["id"], room["id"])

        logger.info(f"Room {room['id']} created for {phone} via {created_from} ({bound} WhatsApp messages bound)")
        return serialize_room(room, message_count=bound)

    async def get_or_create_for_phone(
        self,
        phone: str,
        channel: str,
        source: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> dict:
        """
        Webhook link flow: return the phone's room, creating it on first use.
        Adds `created` and the invite `link` to the room payload.
        """
        if not phone:
            raise MissingRequiredFieldError(["phone"])

        async with self.gateway.session() as repos:
            existing = await repos.rooms.get_by_phone(phone)
            if existing:
                message_count = await count_room_messages(repos, existing)

        if existing:
            room = serialize_room(existing, message_count=message_count)
            created = False
        else:
            try:
                room = await self.create_room(
                    phone=phone,
                    channel=channel,
                    source=source,
                    user_agent=user_agent,
                    ip_address=ip_address,
                    created_from="webhook",
                )
                created = True
            except ConflictError:
                # Lost a creation race for the same phone; return the winner
                return await self.get_or_create_for_phone(phone, channel, source, user_agent, ip_address)

        room["created"] = created
        room["link"] = settings.build_invite_link(room["id"], phone)
        return room

    # ============================================
    # READ
    # ============================================

    async def list_rooms(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        skip = (page - 1) * limit

        async with self.gateway.session() as repos:
            rooms = await repos.rooms.list_rooms(skip=skip, limit=limit)
            total = await repos.rooms.get_total_count()
            items = [serialize_room(room, await count_room_messages(repos, room)) for room in rooms]

        return {
            "rooms": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        }

    async def get_room(self, room_id: str) -> dict:
        room_id = require_object_id(room_id)
        async with self.gateway.session() as repos:
            room = await repos.rooms.get_by_id(room_id)
            if room is None:
                raise RoomNotFoundError(room_id)
            message_count = await count_room_messages(repos, room)
        return serialize_room(room, message_count=message_count)

    # ============================================
    # DELETE
    # ============================================

    async def delete_room(self, room_id: str) -> dict:
        """Delete a room and its chat messages; its WhatsApp messages become unbound."""
        room_id = require_object_id(room_id)
        async with self.gateway.session() as repos:
            deleted = await repos.rooms.delete_room(room_id)
        if not deleted:
            raise RoomNotFoundError(room_id)
        logger.info(f"Room {room_id} deleted")
        return {"success": True, "id": room_id}
