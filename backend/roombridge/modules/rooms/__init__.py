"""
Rooms Module

Per-phone conversation rooms and their live membership:
- Room CRUD and the webhook room link
- Presence (connected sockets, open/closed status)
- Join / leave / forced disconnects
"""

from .models.room import Room

__all__ = ["Room"]
