"""
Contact Repository
Database operations for the contacts table.
"""
from typing import Optional, List

from sqlalchemy import or_, select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.contacts.models.contact import Contact
from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE
from roombridge.shared.db.base import model_to_dict


class ContactRepository:
    """Repository for contact CRUD operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get_by_id(self, contact_id: str) -> Optional[dict]:
        result = await self.db.execute(select(Contact).where(Contact.id == contact_id))
        contact = result.scalar_one_or_none()
        return model_to_dict(contact) if contact else None

    async def get_by_phone(self, phone: str) -> Optional[dict]:
        result = await self.db.execute(select(Contact).where(Contact.phone == phone))
        contact = result.scalar_one_or_none()
        return model_to_dict(contact) if contact else None

    async def get_by_username(self, username: str) -> Optional[dict]:
        result = await self.db.execute(select(Contact).where(Contact.username == username))
        contact = result.scalar_one_or_none()
        return model_to_dict(contact) if contact else None

    def _search_filter(self, query, search: Optional[str]):
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Contact.username.ilike(pattern), Contact.phone.ilike(pattern)))
        return query

    async def list_contacts(
        self,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        search: Optional[str] = None
    ) -> List[dict]:
        """Newest contacts first, optionally filtered by username/phone substring."""
        query = self._search_filter(select(Contact), search)
        query = query.order_by(Contact.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return [model_to_dict(c) for c in result.scalars().all()]

    async def get_total_count(self, search: Optional[str] = None) -> int:
        query = self._search_filter(select(func.count()).select_from(Contact), search)
        result = await self.db.execute(query)
        return result.scalar() or 0

    # ============================================
    # CREATE / UPDATE
    # ============================================

    async def create_contact(self, contact_data: dict) -> dict:
        contact = Contact(**contact_data)
        self.db.add(contact)
        await self.db.flush()
        await self.db.refresh(contact)
        return model_to_dict(contact)

    async def update_contact(self, contact_id: str, values: dict) -> Optional[dict]:
        stmt = (
            update(Contact)
            .where(Contact.id == contact_id)
            .values(**values, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        self.db.expire_all()  # Re-read past the identity map
        return await self.get_by_id(contact_id)
