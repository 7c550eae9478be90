"""
WATI Message Repository
Database operations for the wati_messages table.

Handles inbound WhatsApp messages delivered by the WATI webhook.
"""
from typing import Optional, List, Sequence, Tuple

from sqlalchemy import and_, or_, select, update, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.messages.models.wati_message import WatiMessage
from roombridge.shared.db.base import model_to_dict
from roombridge.shared.utils.ids import new_object_id


class WatiMessageRepository:
    """Repository for WATI message operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get_by_message_id(self, message_id: str) -> Optional[dict]:
        """Fetch a message by WATI's message ID."""
        result = await self.db.execute(select(WatiMessage).where(WatiMessage.message_id == message_id))
        message = result.scalar_one_or_none()
        return model_to_dict(message) if message else None

    async def get_for_room(self, room_id: str, phone: Optional[str] = None) -> List[dict]:
        """
        Messages bound to the room, plus orphans (room_id NULL) sharing the
        room's phone when a phone is given.
        """
        condition = WatiMessage.room_id == room_id
        if phone:
            condition = or_(condition, and_(WatiMessage.room_id.is_(None), WatiMessage.phone == phone))

        query = select(WatiMessage).where(condition).order_by(WatiMessage.date.asc())
        result = await self.db.execute(query)
        return [model_to_dict(m) for m in result.scalars().all()]

    async def count_for_phone(self, phone: str) -> int:
        query = select(func.count()).select_from(WatiMessage).where(WatiMessage.phone == phone)
        result = await self.db.execute(query)
        return result.scalar() or 0

    # ============================================
    # CREATE OPERATIONS
    # ============================================

    async def create_message(self, message_data: dict) -> Tuple[dict, bool]:
        """
        Insert an inbound message. Webhook retries carry the same provider id,
        so an existing message_id is left untouched.

        Returns (message, created).
        """
        values = {"id": new_object_id(), **message_data}
        stmt = (
            insert(WatiMessage)
            .values(**values)
            .on_conflict_do_nothing(index_elements=[WatiMessage.message_id])
            .returning(WatiMessage.id)
        )
        result = await self.db.execute(stmt)
        created = result.first() is not None
        message = await self.get_by_message_id(message_data["message_id"])
        return message, created

    # ============================================
    # UPDATE OPERATIONS
    # ============================================

    async def bind_orphans(self, phone: str, room_id: str) -> int:
        """Attach messages that arrived before a room existed for their phone."""
        stmt = (
            update(WatiMessage)
            .where(WatiMessage.phone == phone, WatiMessage.room_id.is_(None))
            .values(room_id=room_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def set_contact_by_phone(self, phone: str, contact_id: str) -> int:
        stmt = (
            update(WatiMessage)
            .where(WatiMessage.phone == phone)
            .values(contact_id=contact_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def update_phone(self, old_phone: str, new_phone: str) -> int:
        stmt = (
            update(WatiMessage)
            .where(WatiMessage.phone == old_phone)
            .values(phone=new_phone)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def set_tags_by_contact(self, contact_id: str, tags: Sequence[str]) -> int:
        stmt = (
            update(WatiMessage)
            .where(WatiMessage.contact_id == contact_id)
            .values(tags=list(tags))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount
