"""
WATI Message ORM Model
SQLAlchemy model representing the 'wati_messages' table.

Inbound WhatsApp messages received through the WATI webhook. Bound to a room
by phone at ingestion time; room_id stays NULL (orphan) until a room exists
for that phone.

`date` keeps the provider timestamp as an ISO-8601 string in fixed UTC-3
without an offset suffix, exactly as it has always been stored.
"""
from sqlalchemy import Column, String, Text, DateTime, Index, ForeignKey, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.sql import func

from roombridge.shared.db.base import Base, object_id_column


class WatiMessage(Base):
    __tablename__ = "wati_messages"

    id = object_id_column()

    # ============================================
    # WATI TRACKING
    # ============================================
    message_id = Column(Text, unique=True, nullable=False)  # Provider message id
    conversation_id = Column(Text, nullable=True)
    ticket_id = Column(Text, nullable=True)

    room_id = Column(
        String(24),
        ForeignKey('rooms.id', ondelete='SET NULL'),
        nullable=True
    )

    # ============================================
    # CONTENT
    # ============================================
    phone = Column(Text, nullable=False)
    username = Column(Text, nullable=True)
    message = Column(Text, nullable=False, default="")
    type_message = Column(Text, nullable=False, default="text")
    date = Column(Text, nullable=False)

    contact_id = Column(String(24), nullable=True)
    tags = Column(ARRAY(Text), nullable=False, default=list, server_default=text("'{}'::text[]"))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_wati_messages_room_id', 'room_id'),
        Index('idx_wati_messages_phone', 'phone'),
        Index('idx_wati_messages_contact_id', 'contact_id'),
    )

    def __repr__(self):
        return f"<WatiMessage(id={self.id}, message_id='{self.message_id}', phone='{self.phone}')>"
