"""
Contacts - Pydantic Schemas
"""
from typing import Optional, List
from pydantic import BaseModel, Field


class CreateContactRequest(BaseModel):
    """Request to create a contact; links rooms and messages sharing its phone"""
    phone: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1)
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "phone": "+54911",
                "username": "ana",
                "source": "web",
                "tags": ["vip"]
            }
        }


class UpdateContactRequest(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    phone: Optional[str] = None
    username: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
