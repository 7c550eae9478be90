"""
Canned Response ORM Model
SQLAlchemy model representing the 'responses' table.

Reusable reply templates keyed by a unique shorthand (`atajo`).
"""
from sqlalchemy import Column, Boolean, Text, Index, text as sql_text
from sqlalchemy.dialects.postgresql import ARRAY

from roombridge.shared.db.base import Base, TimestampMixin, object_id_column


class CannedResponse(Base, TimestampMixin):
    __tablename__ = "responses"

    id = object_id_column()
    atajo = Column(Text, unique=True, nullable=False)
    text = Column(Text, nullable=True)
    image = Column(Text, nullable=False, default="")
    type = Column(Text, nullable=False)            # text / image / mixed
    status = Column(Boolean, nullable=False, default=True)
    triggers = Column(ARRAY(Text), nullable=False, default=list, server_default=sql_text("'{}'::text[]"))

    __table_args__ = (
        Index('idx_responses_created', 'created_at'),
    )

    def __repr__(self):
        return f"<CannedResponse(id={self.id}, atajo='{self.atajo}', type='{self.type}')>"
