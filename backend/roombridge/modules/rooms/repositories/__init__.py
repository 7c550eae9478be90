"""
Rooms Repositories
"""

from .room_repository import RoomRepository

__all__ = ["RoomRepository"]
