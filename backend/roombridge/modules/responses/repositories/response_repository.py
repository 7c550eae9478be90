"""
Canned Response Repository
Database operations for the responses table.
"""
from typing import Optional, List

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.responses.models.canned_response import CannedResponse
from roombridge.shared.db.base import model_to_dict


class ResponseRepository:
    """Repository for canned response CRUD operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_by_id(self, response_id: str) -> Optional[dict]:
        result = await self.db.execute(select(CannedResponse).where(CannedResponse.id == response_id))
        response = result.scalar_one_or_none()
        return model_to_dict(response) if response else None

    async def get_by_atajo(self, atajo: str, exclude_id: Optional[str] = None) -> Optional[dict]:
        query = select(CannedResponse).where(CannedResponse.atajo == atajo)
        if exclude_id:
            query = query.where(CannedResponse.id != exclude_id)
        result = await self.db.execute(query)
        response = result.scalars().first()
        return model_to_dict(response) if response else None

    async def list_responses(self, atajo: Optional[str] = None) -> List[dict]:
        """Newest first; `atajo` is a case-insensitive partial match."""
        query = select(CannedResponse)
        if atajo:
            query = query.where(CannedResponse.atajo.ilike(f"%{atajo}%"))
        query = query.order_by(CannedResponse.created_at.desc())
        result = await self.db.execute(query)
        return [model_to_dict(r) for r in result.scalars().all()]

    async def create_response(self, response_data: dict) -> dict:
        response = CannedResponse(**response_data)
        self.db.add(response)
        await self.db.flush()
        await self.db.refresh(response)
        return model_to_dict(response)

    async def update_response(self, response_id: str, values: dict) -> Optional[dict]:
        stmt = (
            update(CannedResponse)
            .where(CannedResponse.id == response_id)
            .values(**values, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return None
        self.db.expire_all()  # Re-read past the identity map
        return await self.get_by_id(response_id)
