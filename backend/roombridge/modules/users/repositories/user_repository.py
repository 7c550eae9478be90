"""
User Repository
Database operations for the users table.

Key patterns:
- find-or-create by phone is an INSERT ... ON CONFLICT DO NOTHING followed by
  a read, so two concurrent first sightings of a phone yield one row
- room binding is an add-to-set on the text[] column
"""
from datetime import datetime
from typing import Optional, List, Sequence

from sqlalchemy import String, any_, case, func, literal, null, select, update
from sqlalchemy.dialects.postgresql import ARRAY, insert
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.users.models.user import User
from roombridge.shared.core.constants import DEFAULT_USER_ROLE
from roombridge.shared.db.base import model_to_dict
from roombridge.shared.utils.ids import new_object_id


class UserRepository:
    """Repository for user lookups and connection bookkeeping."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get_by_phone(self, phone: str) -> Optional[dict]:
        result = await self.db.execute(select(User).where(User.phone == phone))
        user = result.scalar_one_or_none()
        return model_to_dict(user) if user else None

    async def get_by_socket_ids(self, socket_ids: Sequence[str]) -> List[dict]:
        """Fetch all users currently bound to any of the given sockets in one query."""
        if not socket_ids:
            return []
        result = await self.db.execute(select(User).where(User.socket_id.in_(list(socket_ids))))
        return [model_to_dict(u) for u in result.scalars().all()]

    async def list_users(self) -> List[dict]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc()))
        return [model_to_dict(u) for u in result.scalars().all()]

    # ============================================
    # CREATE / UPSERT
    # ============================================

    async def find_or_create_by_phone(self, phone: str) -> dict:
        """Upsert by phone; new users get role 'user' and no rooms."""
        stmt = (
            insert(User)
            .values(id=new_object_id(), phone=phone, role=DEFAULT_USER_ROLE, rooms=[], is_connected=False)
            .on_conflict_do_nothing(index_elements=[User.phone])
        )
        await self.db.execute(stmt)
        return await self.get_by_phone(phone)

    # ============================================
    # CONNECTION STATE
    # ============================================

    async def mark_connected(self, user_id: str, socket_id: str, now: datetime) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(socket_id=socket_id, connected_at=now, is_connected=True, disconnected_at=null())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    async def mark_disconnected(self, user_id: str, now: datetime, socket_id: Optional[str] = None) -> bool:
        """Unbind the user. With socket_id, only while the user still holds that socket."""
        stmt = update(User).where(User.id == user_id)
        if socket_id is not None:
            stmt = stmt.where(User.socket_id == socket_id)
        stmt = (
            stmt
            .values(socket_id=null(), disconnected_at=now, is_connected=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    async def mark_disconnected_by_socket(self, socket_id: str, now: datetime) -> Optional[str]:
        """Unbind whichever user currently holds socket_id. Returns that user's id."""
        stmt = (
            update(User)
            .where(User.socket_id == socket_id)
            .values(socket_id=null(), disconnected_at=now, is_connected=False)
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        row = result.first()
        return row[0] if row else None

    async def reset_connections(self, now: datetime) -> int:
        stmt = (
            update(User)
            .where(User.is_connected.is_(True))
            .values(socket_id=null(), disconnected_at=now, is_connected=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def add_room(self, user_id: str, room_id: str) -> bool:
        """Add room_id to the user's room set (duplicates ignored)."""
        room_param = literal(room_id, String(24))
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(
                rooms=case(
                    (room_param == any_(User.rooms), User.rooms),
                    else_=func.array_append(User.rooms, room_param, type_=ARRAY(String(24))),
                ),
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0
