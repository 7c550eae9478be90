"""
Contact Service

Contacts plus the fan-out that keeps rooms and messages pointing at them.

Fan-out steps run one collection per transaction: a failing collection is
reported in `failed` and does not undo the collections already rewritten.
"""
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roombridge.shared.db.gateway import PersistenceGateway, Repositories
from roombridge.shared.utils.exceptions import (
    ChatBackendError,
    ConflictError,
    EntityNotFoundError,
    MissingRequiredFieldError,
    ValidationFailedError,
)
from roombridge.shared.utils.ids import require_object_id
from roombridge.shared.utils.time_utils import isoformat_utc

logger = logging.getLogger("contact_service")

UPDATABLE_FIELDS = ("phone", "username", "source", "notes", "tags")

FanOutStep = Tuple[str, Callable[[Repositories], Awaitable[int]]]


def serialize_contact(contact: dict) -> dict:
    return {
        "id": contact["id"],
        "phone": contact["phone"],
        "username": contact["username"],
        "source": contact.get("source"),
        "notes": contact.get("notes"),
        "tags": list(contact.get("tags") or []),
        "createdAt": isoformat_utc(contact.get("created_at")),
        "updatedAt": isoformat_utc(contact.get("updated_at")),
    }


def _normalize_tags(tags) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, (list, tuple)):
        raise ValidationFailedError("tags must be a list of strings")
    return [str(t).strip() for t in tags if str(t).strip()]


class ContactService:

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def _run_fan_out(self, contact_id: str, steps: List[FanOutStep]) -> Tuple[Dict[str, int], List[str]]:
        updates: Dict[str, int] = {}
        failed: List[str] = []
        for counter, step in steps:
            try:
                async with self.gateway.session() as repos:
                    updates[counter] = updates.get(counter, 0) + await step(repos)
            except ChatBackendError as e:
                logger.error(f"Contact {contact_id} fan-out step {counter} failed: {e.message}")
                updates.setdefault(counter, 0)
                failed.append(counter)
        return updates, failed

    async def _ensure_unique(self, repos: Repositories, phone: Optional[str], username: Optional[str], exclude_id: Optional[str] = None):
        if phone:
            existing = await repos.contacts.get_by_phone(phone)
            if existing and existing["id"] != exclude_id:
                raise ConflictError("A contact with this phone already exists")
        if username:
            existing = await repos.contacts.get_by_username(username)
            if existing and existing["id"] != exclude_id:
                raise ConflictError("A contact with this username already exists")

    # ============================================
    # CREATE
    # ============================================

    async def create_contact(self, data: dict) -> dict:
        """
        Create a contact and link every room and message of its phone to it.

        Returns {contact, updates: {roomsUpdated, messagesUpdated, whatsappMessagesUpdated}}.
        """
        missing = [f for f in ("phone", "username", "source") if not data.get(f)]
        if missing:
            raise MissingRequiredFieldError(missing)

        values = {
            "phone": data["phone"].strip(),
            "username": data["username"].strip(),
            "source": data["source"],
            "notes": data.get("notes") or "",
            "tags": _normalize_tags(data.get("tags")),
        }

        async with self.gateway.session() as repos:
            await self._ensure_unique(repos, values["phone"], values["username"])
            contact = await repos.contacts.create_contact(values)

        contact_id, phone, username = contact["id"], contact["phone"], contact["username"]
        updates, failed = await self._run_fan_out(contact_id, [
            ("roomsUpdated", lambda r: r.rooms.set_contact_by_phone(phone, contact_id, username)),
            ("messagesUpdated", lambda r: r.chat_messages.set_contact_by_phone(phone, contact_id)),
            ("whatsappMessagesUpdated", lambda r: r.wati_messages.set_contact_by_phone(phone, contact_id)),
        ])

        logger.info(f"Contact {contact_id} created for {phone}: {updates}")
        result = {"contact": serialize_contact(contact), "updates": updates}
        if failed:
            result["failed"] = failed
        return result

    # ============================================
    # UPDATE
    # ============================================

    async def update_contact(self, contact_id: str, data: dict) -> dict:
        """
        Update a contact and propagate the change:
        - phone: rewritten on rooms, chat and WhatsApp messages of the old phone
        - username: rewritten on the contact's rooms
        - tags: rewritten on everything linked to the contact
        """
        contact_id = require_object_id(contact_id, "Contact")
        values = {k: data[k] for k in UPDATABLE_FIELDS if data.get(k) is not None}
        if "tags" in values:
            values["tags"] = _normalize_tags(values["tags"])
        for field in ("phone", "username"):
            if field in values:
                values[field] = values[field].strip()
                if not values[field]:
                    raise MissingRequiredFieldError([field])

        async with self.gateway.session() as repos:
            current = await repos.contacts.get_by_id(contact_id)
            if current is None:
                raise EntityNotFoundError("Contact", contact_id)
            await self._ensure_unique(repos, values.get("phone"), values.get("username"), exclude_id=contact_id)
            contact = await repos.contacts.update_contact(contact_id, values) if values else current

        old_phone, new_phone = current["phone"], contact["phone"]
        steps: List[FanOutStep] = []
        if new_phone != old_phone:
            steps += [
                ("roomsUpdated", lambda r: r.rooms.update_phone(old_phone, new_phone)),
                ("messagesUpdated", lambda r: r.chat_messages.update_phone(old_phone, new_phone)),
                ("whatsappMessagesUpdated", lambda r: r.wati_messages.update_phone(old_phone, new_phone)),
            ]
        if contact["username"] != current["username"]:
            username = contact["username"]
            steps.append(("roomsUpdated", lambda r: r.rooms.set_username_by_contact(contact_id, username)))
        if list(contact.get("tags") or []) != list(current.get("tags") or []):
            tags = list(contact.get("tags") or [])
            steps += [
                ("roomsUpdated", lambda r: r.rooms.set_tags_by_contact(contact_id, tags)),
                ("messagesUpdated", lambda r: r.chat_messages.set_tags_by_contact(contact_id, tags)),
                ("whatsappMessagesUpdated", lambda r: r.wati_messages.set_tags_by_contact(contact_id, tags)),
            ]

        updates, failed = await self._run_fan_out(contact_id, steps)
        for counter in ("roomsUpdated", "messagesUpdated", "whatsappMessagesUpdated"):
            updates.setdefault(counter, 0)

        logger.info(f"Contact {contact_id} updated: {updates}")
        result = {"contact": serialize_contact(contact), "updates": updates}
        if failed:
            result["failed"] = failed
        return result

    # ============================================
    # READ
    # ============================================

    async def get_contact(self, contact_id: str) -> dict:
        contact_id = require_object_id(contact_id, "Contact")
        async with self.gateway.session() as repos:
            contact = await repos.contacts.get_by_id(contact_id)
        if contact is None:
            raise EntityNotFoundError("Contact", contact_id)
        return serialize_contact(contact)

    async def list_contacts(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, search: Optional[str] = None) -> dict:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        async with self.gateway.session() as repos:
            contacts = await repos.contacts.list_contacts(skip=(page - 1) * limit, limit=limit, search=search)
            total = await repos.contacts.get_total_count(search=search)
        return {
            "contacts": [serialize_contact(c) for c in contacts],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": (total + limit - 1) // limit,
            },
        }
