"""
Presence Reset Script
=====================
Clears every room's socket set, closes every room and marks every user
disconnected. Run it after a crash or restart of the chat server, before
clients reconnect: no socket survives a restart, so any socket id still in
the database is stale.

Usage:
    python scripts/reset_presence.py
"""
import asyncio
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add the backend directory to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.modules.users.services.user_directory import UserDirectory
from roombridge.shared.core.logging import setup_logging
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.db.session import AsyncSessionLocal, engine


async def main() -> dict:
    gateway = PersistenceGateway(AsyncSessionLocal)
    room_engine = RoomEngine(
        gateway,
        PresenceStore(gateway),
        UserDirectory(gateway),
        bus=None,  # Nothing is broadcast: no client is connected
    )
    try:
        return await room_engine.reset_presence()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    result = asyncio.run(main())
    print(f"Rooms closed: {result['roomsClosed']}, users disconnected: {result['usersDisconnected']}")
