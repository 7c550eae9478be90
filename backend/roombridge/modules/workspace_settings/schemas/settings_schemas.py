"""
Workspace Settings - Pydantic Schemas
"""
from typing import Optional, Union
from pydantic import BaseModel, Field


class SaveSettingsRequest(BaseModel):
    """Upsert of the workspace chat profile (camelCase on the wire)"""
    display_name: str = Field(..., alias="displayName", min_length=1)
    description: str = Field(..., min_length=1)
    welcome_message: str = Field(..., alias="welcomeMessage", min_length=1)
    profile_image: Optional[str] = Field(default=None, alias="profileImage")
    is_connected: bool = Field(default=False, alias="isConnected")
    platform_link: Optional[str] = Field(default=None, alias="platformLink")
    phone: Optional[str] = None
    timestamp: Optional[Union[str, int, float]] = None

    class Config:
        populate_by_name = True
