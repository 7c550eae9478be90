"""
Workspace Settings ORM Model
Single-row table holding the public chat profile (display name, welcome
message...). The row id is fixed (WORKSPACE_SETTINGS_ID).
"""
from sqlalchemy import Column, Boolean, Text

from roombridge.shared.db.base import Base, TimestampMixin, object_id_column


class WorkspaceSettings(Base, TimestampMixin):
    __tablename__ = "workspace_settings"

    id = object_id_column()
    display_name = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    welcome_message = Column(Text, nullable=False)
    profile_image = Column(Text, nullable=True)
    is_connected = Column(Boolean, nullable=False, default=False)
    platform_link = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    timestamp = Column(Text, nullable=True)  # Client-provided, stored verbatim

    def __repr__(self):
        return f"<WorkspaceSettings(id={self.id}, display_name='{self.display_name}')>"
