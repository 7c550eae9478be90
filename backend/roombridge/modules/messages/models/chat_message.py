"""
Chat Message ORM Model
SQLAlchemy model representing the 'messages' table.

Messages posted by browser sockets. Append-only: only contact_id, phone and
tags are ever rewritten (by contact fan-out).
"""
from sqlalchemy import Column, Boolean, String, Text, DateTime, Index, ForeignKey, text
from sqlalchemy.dialects.postgresql import ARRAY

from roombridge.shared.db.base import Base, object_id_column


class ChatMessage(Base):
    __tablename__ = "messages"

    id = object_id_column()

    room_id = Column(
        String(24),
        ForeignKey('rooms.id', ondelete='CASCADE'),
        nullable=False
    )

    # ============================================
    # CONTENT
    # ============================================
    content = Column(Text, nullable=False, default="")
    type = Column(Text, nullable=False, default="text")   # text / image / mixed / ...
    username = Column(Text, nullable=False)
    socket_id = Column(Text, nullable=True)
    welcome = Column(Boolean, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)

    # ============================================
    # DENORMALIZED CONTACT DATA (contact fan-out)
    # ============================================
    phone = Column(Text, nullable=True)
    contact_id = Column(String(24), nullable=True)
    tags = Column(ARRAY(Text), nullable=False, default=list, server_default=text("'{}'::text[]"))

    __table_args__ = (
        Index('idx_messages_room_ts', 'room_id', 'timestamp'),
        Index('idx_messages_phone', 'phone'),
        Index('idx_messages_contact_id', 'contact_id'),
    )

    def __repr__(self):
        return f"<ChatMessage(id={self.id}, room_id={self.room_id}, type='{self.type}')>"
