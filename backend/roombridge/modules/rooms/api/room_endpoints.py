"""
Rooms API Endpoints
Room lifecycle plus operator presence controls (connections, forced disconnects).
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from roombridge.dependencies import get_presence_store, get_room_engine, get_room_service
from roombridge.modules.rooms.schemas.room_schemas import (
    CreateRoomRequest,
    DisconnectAllRequest,
    ForceDisconnectRequest,
)
from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.modules.rooms.services.room_service import RoomService
from roombridge.shared.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from roombridge.shared.utils.ids import require_object_id
from roombridge.shared.utils.request_utils import get_client_ip

router = APIRouter()
logger = logging.getLogger("rooms_api")


# ============================================
# ROOM CRUD
# ============================================

@router.get("", summary="List rooms")
async def list_rooms(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: RoomService = Depends(get_room_service),
):
    """Newest first, each with messageCount, status and connectedCount."""
    return await service.list_rooms(page=page, limit=limit)


@router.post("", status_code=201, summary="Create a room")
async def create_room(
    body: CreateRoomRequest,
    request: Request,
    service: RoomService = Depends(get_room_service),
):
    return await service.create_room(
        phone=body.phone,
        channel=body.channel,
        source=body.source,
        name=body.name,
        user_agent=request.headers.get("User-Agent"),
        ip_address=get_client_ip(request),
        created_from="api",
    )


@router.get("/{room_id}", summary="Room detail")
async def get_room(room_id: str, service: RoomService = Depends(get_room_service)):
    return await service.get_room(room_id)


@router.delete("/{room_id}", summary="Delete a room")
async def delete_room(room_id: str, service: RoomService = Depends(get_room_service)):
    return await service.delete_room(room_id)


# ============================================
# PRESENCE CONTROLS
# ============================================

@router.get("/{room_id}/connections", summary="Sockets in a room with their users")
async def get_connections(room_id: str, presence: PresenceStore = Depends(get_presence_store)):
    return await presence.read_connections_with_roles(require_object_id(room_id))


@router.post("/{room_id}/disconnect", summary="Force one socket out of a room")
async def force_disconnect(
    room_id: str,
    body: ForceDisconnectRequest,
    engine: RoomEngine = Depends(get_room_engine),
):
    room_id = require_object_id(room_id)
    logger.info(f"Operator disconnect of {body.socket_id} from room {room_id}")
    return await engine.force_disconnect(room_id, body.socket_id, body.reason)


@router.post("/{room_id}/disconnect-all", summary="Force every socket out of a room")
async def disconnect_all(
    room_id: str,
    body: Optional[DisconnectAllRequest] = None,
    engine: RoomEngine = Depends(get_room_engine),
):
    room_id = require_object_id(room_id)
    body = body or DisconnectAllRequest()
    return await engine.disconnect_all(room_id, body.reason)
