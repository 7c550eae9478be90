"""
Rooms Services
"""
from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.modules.rooms.services.room_service import RoomService

__all__ = [
    "PresenceStore",
    "RoomEngine",
    "RoomService",
]
