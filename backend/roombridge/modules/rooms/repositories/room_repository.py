"""
Room Repository
Database operations for the rooms table.

Key patterns:
- Membership of `connected_sockets` is changed only through single UPDATE
  statements evaluated by PostgreSQL under the row lock (add-to-set via
  array_append guarded by `= ANY`, pull via array_remove). Application code
  never reads the array, edits it and writes it back.
- The open/closed status is recomputed inside the same statement that
  changes membership, so status and membership can't drift apart.
"""
from datetime import datetime
from typing import Optional, List, Sequence

from sqlalchemy import Text, and_, any_, case, delete, func, literal, null, or_, select, update
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.rooms.models.room import Room
from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE, ROOM_STATUS_CLOSED, ROOM_STATUS_OPEN
from roombridge.shared.db.base import model_to_dict

PRESENCE_COLUMNS = (Room.id, Room.status, Room.connected_sockets, Room.opened_at, Room.closed_at)


# ============================================
# STATEMENT BUILDERS (presence primitives)
# ============================================

def build_add_socket_stmt(room_id: str, socket_id: str, now: datetime):
    """
    Add socket_id to the room's socket set and make sure the room is open.

    Re-opening (closed -> open) sets opened_at to `now` and clears closed_at.
    Adding a socket that is already present leaves the set unchanged.
    """
    socket_param = literal(socket_id, Text)
    already_member = socket_param == any_(Room.connected_sockets)

    return (
        update(Room)
        .where(Room.id == room_id)
        .values(
            connected_sockets=case(
                (already_member, Room.connected_sockets),
                else_=func.array_append(Room.connected_sockets, socket_param, type_=ARRAY(Text)),
            ),
            status=ROOM_STATUS_OPEN,
            opened_at=case(
                (or_(Room.status == ROOM_STATUS_CLOSED, Room.opened_at.is_(None)), now),
                else_=Room.opened_at,
            ),
            closed_at=null(),
        )
        .returning(*PRESENCE_COLUMNS)
        .execution_options(synchronize_session=False)
    )


def build_remove_socket_stmt(room_id: str, socket_id: str, now: datetime):
    """
    Pull socket_id from the room's socket set; close the room in the same
    statement when the set ends up empty.

    closed_at is stamped only on the open -> closed transition, so pulling
    from an already-closed room keeps the original close time.
    """
    remaining = func.array_remove(Room.connected_sockets, literal(socket_id, Text), type_=ARRAY(Text))
    becomes_empty = func.coalesce(func.cardinality(remaining), 0) == 0

    return (
        update(Room)
        .where(Room.id == room_id)
        .values(
            connected_sockets=remaining,
            status=case((becomes_empty, ROOM_STATUS_CLOSED), else_=ROOM_STATUS_OPEN),
            closed_at=case(
                (and_(becomes_empty, Room.status == ROOM_STATUS_OPEN), now),
                (becomes_empty, func.coalesce(Room.closed_at, now)),
                else_=null(),
            ),
        )
        .returning(*PRESENCE_COLUMNS)
        .execution_options(synchronize_session=False)
    )


def build_reset_presence_stmt(now: datetime):
    """Empty every socket set and close every room that still looks open."""
    return (
        update(Room)
        .where(or_(
            Room.status == ROOM_STATUS_OPEN,
            func.coalesce(func.cardinality(Room.connected_sockets), 0) > 0,
        ))
        .values(
            connected_sockets=literal([], ARRAY(Text)),
            status=ROOM_STATUS_CLOSED,
            closed_at=func.coalesce(Room.closed_at, now),
        )
        .execution_options(synchronize_session=False)
    )


class RoomRepository:
    """Repository for room CRUD and presence operations."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # ============================================
    # READ OPERATIONS
    # ============================================

    async def get_by_id(self, room_id: str) -> Optional[dict]:
        """Fetch a single room by ID."""
        result = await self.db.execute(select(Room).where(Room.id == room_id))
        room = result.scalar_one_or_none()
        return model_to_dict(room) if room else None

    async def get_by_phone(self, phone: str) -> Optional[dict]:
        result = await self.db.execute(select(Room).where(Room.phone == phone))
        room = result.scalar_one_or_none()
        return model_to_dict(room) if room else None

    async def list_rooms(self, skip: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> List[dict]:
        """Newest rooms first."""
        query = select(Room).order_by(Room.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return [model_to_dict(r) for r in result.scalars().all()]

    async def get_total_count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Room))
        return result.scalar() or 0

    async def get_presence(self, room_id: str) -> Optional[dict]:
        result = await self.db.execute(select(*PRESENCE_COLUMNS).where(Room.id == room_id))
        row = result.first()
        return dict(row._mapping) if row else None

    async def get_room_ids_for_socket(self, socket_id: str) -> List[str]:
        """Rooms whose socket set currently contains socket_id."""
        query = select(Room.id).where(literal(socket_id, Text) == any_(Room.connected_sockets))
        result = await self.db.execute(query)
        return [row[0] for row in result.all()]

    # ============================================
    # CREATE / DELETE
    # ============================================

    async def create_room(self, room_data: dict) -> dict:
        room = Room(**room_data)
        self.db.add(room)
        await self.db.flush()  # Flush to surface unique violations, let caller manage commit
        await self.db.refresh(room)
        return model_to_dict(room)

    async def delete_room(self, room_id: str) -> bool:
        result = await self.db.execute(delete(Room).where(Room.id == room_id))
        return result.rowcount > 0

    # ============================================
    # PRESENCE (atomic primitives)
    # ============================================

    async def add_socket(self, room_id: str, socket_id: str, now: datetime) -> Optional[dict]:
        """Set-add + ensure open. Returns the new presence row, None if no such room."""
        result = await self.db.execute(build_add_socket_stmt(room_id, socket_id, now))
        row = result.first()
        return dict(row._mapping) if row else None

    async def remove_socket(self, room_id: str, socket_id: str, now: datetime) -> Optional[dict]:
        """Set-pull + close when empty. Returns the new presence row, None if no such room."""
        result = await self.db.execute(build_remove_socket_stmt(room_id, socket_id, now))
        row = result.first()
        return dict(row._mapping) if row else None

    async def reset_presence(self, now: datetime) -> int:
        result = await self.db.execute(build_reset_presence_stmt(now))
        return result.rowcount

    # ============================================
    # CONTACT FAN-OUT
    # ============================================

    async def set_contact_by_phone(self, phone: str, contact_id: str, username: str) -> int:
        stmt = (
            update(Room)
            .where(Room.phone == phone)
            .values(contact_id=contact_id, username=username)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def update_phone(self, old_phone: str, new_phone: str) -> int:
        stmt = (
            update(Room)
            .where(Room.phone == old_phone)
            .values(phone=new_phone)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def set_username_by_contact(self, contact_id: str, username: str) -> int:
        stmt = (
            update(Room)
            .where(Room.contact_id == contact_id)
            .values(username=username)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount

    async def set_tags_by_contact(self, contact_id: str, tags: Sequence[str]) -> int:
        stmt = (
            update(Room)
            .where(Room.contact_id == contact_id)
            .values(tags=list(tags))
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount
