"""
Messages API Endpoints
Merged chat + WhatsApp timeline of a room.
"""
from fastapi import APIRouter, Depends, Query

from roombridge.dependencies import get_message_pipeline
from roombridge.modules.messages.services.message_pipeline import MessagePipeline
from roombridge.shared.core.constants import DEFAULT_MESSAGES_PAGE_SIZE, MAX_PAGE_SIZE
from roombridge.shared.utils.ids import require_object_id

router = APIRouter()


@router.get("/{room_id}", summary="Room timeline")
async def get_room_messages(
    room_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_MESSAGES_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    pipeline: MessagePipeline = Depends(get_message_pipeline),
):
    """
    Chat and WhatsApp messages of the room, oldest first.
    Timestamps are epoch milliseconds; `source` tells the two apart.
    """
    return await pipeline.read_timeline(require_object_id(room_id), page=page, limit=limit)
