"""
WATI Webhook Ingestor

Turns inbound WATI webhook events into WhatsApp timeline entries bound to the
room whose phone matches the sender's waId. Messages from phones without a
room are stored unbound and picked up when a room for that phone is created.
"""
import logging
from typing import Any, Dict

from roombridge.modules.messages.services.message_pipeline import timeline_entry_to_broadcast, wati_to_timeline_entry
from roombridge.shared.core.constants import DEFAULT_MESSAGE_TYPE
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import MissingRequiredFieldError
from roombridge.shared.utils.time_utils import wati_timestamp_to_iso

logger = logging.getLogger("wati_webhook")

# WATI V1 / V2 names of an inbound customer message
INBOUND_EVENT_TYPES = ("message", "message_v2")


def parse_wati_payload(payload: Dict[str, Any]) -> dict:
    """Map a WATI payload onto wati_messages columns (room binding excluded)."""
    missing = [f for f in ("waId", "id") if not payload.get(f)]
    if missing:
        raise MissingRequiredFieldError(missing)

    return {
        "message_id": str(payload["id"]),
        "conversation_id": payload.get("conversationId"),
        "ticket_id": payload.get("ticketId"),
        "phone": str(payload["waId"]),
        "username": payload.get("senderName"),
        "message": payload.get("text") or "",
        "type_message": payload.get("type") or DEFAULT_MESSAGE_TYPE,
        "date": wati_timestamp_to_iso(payload.get("timestamp")),
    }


class WatiWebhookIngestor:

    def __init__(self, gateway: PersistenceGateway, bus, broadcast_inbound: bool = False):
        self.gateway = gateway
        self.bus = bus
        self.broadcast_inbound = broadcast_inbound

    async def ingest(self, payload: Dict[str, Any]) -> dict:
        """
        Store one webhook event. Redelivered events (same provider id) are
        acknowledged without creating a second record.
        """
        event_type = payload.get("eventType")
        if event_type and event_type not in INBOUND_EVENT_TYPES:
            logger.info(f"Ignoring WATI event type {event_type}")
            return {"success": True, "ignored": True, "eventType": event_type}

        values = parse_wati_payload(payload)

        async with self.gateway.session() as repos:
            room = await repos.rooms.get_by_phone(values["phone"])
            values["room_id"] = room["id"] if room else None
            if room:
                values["contact_id"] = room.get("contact_id")
                values["tags"] = list(room.get("tags") or [])
            message, created = await repos.wati_messages.create_message(values)

        if not created:
            logger.info(f"Duplicate WATI message {values['message_id']} ignored")
        elif message["room_id"] is None:
            logger.info(f"WATI message {values['message_id']} from {values['phone']} stored without a room")
        else:
            logger.info(f"WATI message {values['message_id']} bound to room {message['room_id']}")

        entry = wati_to_timeline_entry(message)
        if created and self.broadcast_inbound and message["room_id"]:
            await self.bus.emit_chat_message(message["room_id"], timeline_entry_to_broadcast(entry, message["room_id"]))

        return {
            "success": True,
            "duplicate": not created,
            "roomId": message["room_id"],
            "message": entry,
        }
