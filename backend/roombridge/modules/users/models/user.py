"""
User ORM Model
SQLAlchemy model representing the 'users' table.

One user per phone. `socket_id` is the most recently associated socket
(last writer wins) and is present only while `is_connected` is true.
"""
from sqlalchemy import Column, Boolean, String, Text, DateTime, Index, text
from sqlalchemy.dialects.postgresql import ARRAY

from roombridge.shared.db.base import Base, TimestampMixin, object_id_column


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = object_id_column()
    phone = Column(Text, unique=True, nullable=False)
    role = Column(Text, nullable=False, default="user")

    # Room ids this user has been bound to (set semantics)
    rooms = Column(ARRAY(String(24)), nullable=False, default=list, server_default=text("'{}'::varchar[]"))

    # ============================================
    # CONNECTION STATE (owned by the user directory)
    # ============================================
    socket_id = Column(Text, nullable=True)
    is_connected = Column(Boolean, nullable=False, default=False)
    connected_at = Column(DateTime(timezone=True), nullable=True)
    disconnected_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_users_socket_id', 'socket_id'),
        Index('idx_users_created', 'created_at'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, phone='{self.phone}', connected={self.is_connected})>"
