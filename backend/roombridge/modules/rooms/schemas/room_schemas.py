"""
Rooms - Pydantic Schemas
Request models for room and presence endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field


# ============================================
# REQUEST MODELS
# ============================================

class CreateRoomRequest(BaseModel):
    """Request to open a room for a phone"""
    phone: str = Field(..., min_length=1)
    channel: str = Field(..., min_length=1, description="e.g. whatsapp, web")
    source: str = Field(..., min_length=1, description="Where the conversation started")
    name: Optional[str] = Field(
        default=None,
        description="Defaults to Chat-{phone}-{channel}-{millis}"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "phone": "+5491112345678",
                "channel": "whatsapp",
                "source": "landing"
            }
        }


class ForceDisconnectRequest(BaseModel):
    """Request to drop one socket from a room"""
    socket_id: str = Field(..., alias="socketId", min_length=1)
    reason: str = Field(default="Disconnected by administrator")

    class Config:
        populate_by_name = True


class DisconnectAllRequest(BaseModel):
    reason: str = Field(default="Room cleared by administrator")
