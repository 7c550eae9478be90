"""
Base class for all SQLAlchemy ORM models.
All table models should inherit from Base.
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import func

from roombridge.shared.utils.ids import new_object_id


class Base(DeclarativeBase):
    """
    Base class for all ORM models.
    This is used by Alembic to detect schema changes.
    """
    pass


def object_id_column():
    """24-char hex primary key generated on the application side."""
    return Column(String(24), primary_key=True, default=new_object_id)


class TimestampMixin:
    """
    Mixin to add created_at and updated_at columns to any model.
    Usage: class MyModel(Base, TimestampMixin):
    """
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


def model_to_dict(instance) -> dict:
    """ORM instance -> plain dict, excluding SQLAlchemy internals."""
    return {k: v for k, v in instance.__dict__.items() if not k.startswith('_')}
