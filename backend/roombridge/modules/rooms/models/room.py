"""
Room ORM Model
SQLAlchemy model representing the 'rooms' table.

A room is the per-phone conversation container: the unit of membership and
broadcast. `connected_sockets` is a text[] used with set semantics and is only
ever mutated by single-statement UPDATEs (see RoomRepository).

Invariants:
- status = 'open'  <=> connected_sockets is non-empty (after the last commit)
- closed_at is set <=> status = 'closed'
"""
from sqlalchemy import Column, String, Text, DateTime, Index, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.sql import func

from roombridge.shared.db.base import Base, object_id_column


class Room(Base):
    __tablename__ = "rooms"

    id = object_id_column()

    # ============================================
    # IDENTITY
    # ============================================
    name = Column(Text, nullable=False)
    phone = Column(Text, unique=True, nullable=False)   # One room per phone
    channel = Column(Text, nullable=False)
    source = Column(Text, nullable=False)
    created_from = Column(Text, nullable=False, default="api")  # 'api' or 'webhook'
    room_metadata = Column("metadata", JSONB, nullable=True, server_default='{}')

    # ============================================
    # PRESENCE (owned by the room engine)
    # ============================================
    status = Column(Text, nullable=False, default="open")  # 'open' / 'closed'
    connected_sockets = Column(
        ARRAY(Text),
        nullable=False,
        default=list,
        server_default=text("'{}'::text[]")
    )
    opened_at = Column(DateTime(timezone=True), nullable=True)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    # ============================================
    # CONTACT LINK (rewritten by contact fan-out)
    # ============================================
    username = Column(Text, nullable=True)
    contact_id = Column(String(24), nullable=True)
    tags = Column(ARRAY(Text), nullable=False, default=list, server_default=text("'{}'::text[]"))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_rooms_status', 'status'),
        Index('idx_rooms_contact_id', 'contact_id'),
        Index('idx_rooms_created', 'created_at'),
        Index('idx_rooms_connected_sockets', 'connected_sockets', postgresql_using='gin'),
    )

    def __repr__(self):
        return f"<Room(id={self.id}, phone='{self.phone}', status='{self.status}')>"
