"""
Chat Message Repository
Database operations for the messages table (socket-originated messages).
"""
from typing import List, Sequence

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.messages.models.chat_message import ChatMessage
from roombridge.shared.db.base import model_to_dict


class ChatMessageRepository:
    """Repository for chat message CRUD operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get_for_room(self, room_id: str) -> List[dict]:
        """All messages of a room, oldest first (commit order)."""
        query = (
            select(ChatMessage)
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
        )
        result = await self.db.execute(query)
        return [model_to_dict(m) for m in result.scalars().all()]

    async def count_for_room(self, room_id: str) -> int:
        query = select(func.count()).select_from(ChatMessage).where(ChatMessage.room_id == room_id)
        result = await self.db.execute(query)
        return result.scalar() or 0

    # ============================================
    # CREATE OPERATIONS
    # ============================================

    async def create_message(self, message_data: dict) -> dict:
        message = ChatMessage(**message_data)
        self.db.add(message)
        await self.db.flush()  # Flush to get defaults, let caller manage commit
        await self.db.refresh(message)
        return model_to_dict(message)

    # ============================================
    # CONTACT FAN-OUT
    # ============================================

    async def set_contact_by_phone(self, phone: str, contact_id: str) -> int:
        stmt = (
            update(ChatMessage)
            .where(ChatMessage.phone == phone)
            .values(contact_id=contact_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def update_phone(self, old_phone: str, new_phone: str) -> int:
        stmt = (
            update(ChatMessage)
            .where(ChatMessage.phone == old_phone)
            .values(phone=new_phone)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def set_tags_by_contact(self, contact_id: str, tags: Sequence[str]) -> int:
        stmt = (
            update(ChatMessage)
            .where(ChatMessage.contact_id == contact_id)
            .values(tags=list(tags))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount
