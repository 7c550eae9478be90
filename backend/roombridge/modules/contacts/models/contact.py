"""
Contact ORM Model
SQLAlchemy model representing the 'contacts' table.

Phone and username are both unique. Creating or updating a contact fans out
to rooms and messages sharing its phone (see ContactService).
"""
from sqlalchemy import Column, Text, Index, text
from sqlalchemy.dialects.postgresql import ARRAY

from roombridge.shared.db.base import Base, TimestampMixin, object_id_column


class Contact(Base, TimestampMixin):
    __tablename__ = "contacts"

    id = object_id_column()
    phone = Column(Text, unique=True, nullable=False)
    username = Column(Text, unique=True, nullable=False)
    source = Column(Text, nullable=False)
    notes = Column(Text, nullable=False, default="")
    tags = Column(ARRAY(Text), nullable=False, default=list, server_default=text("'{}'::text[]"))

    __table_args__ = (
        Index('idx_contacts_created', 'created_at'),
    )

    def __repr__(self):
        return f"<Contact(id={self.id}, phone='{self.phone}', username='{self.username}')>"
