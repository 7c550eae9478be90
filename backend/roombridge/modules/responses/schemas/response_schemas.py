"""
Canned Responses - Pydantic Schemas
"""
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator

from roombridge.shared.core.constants import RESPONSE_TYPES


def _check_type(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in RESPONSE_TYPES:
        raise ValueError(f"Invalid type. Must be one of: {', '.join(RESPONSE_TYPES)}")
    return value


class CreateResponseRequest(BaseModel):
    """Request to create a canned response"""
    atajo: str = Field(..., min_length=1, description="Unique shorthand used to insert the response")
    type: str = Field(..., description="text, image or mixed")
    text: Optional[str] = Field(default=None, description="Required for text and mixed")
    image: Optional[str] = Field(default="", description="Image URL for image and mixed")
    status: bool = True
    triggers: List[str] = Field(default_factory=list)

    @field_validator("type")
    @classmethod
    def check_type(cls, value):
        return _check_type(value)

    class Config:
        json_schema_extra = {
            "example": {
                "atajo": "/hola",
                "type": "text",
                "text": "Hola! En que te puedo ayudar?",
                "triggers": ["hola", "buenas"]
            }
        }


class UpdateResponseRequest(BaseModel):
    atajo: Optional[str] = None
    type: Optional[str] = None
    text: Optional[str] = None
    image: Optional[str] = None
    status: Optional[bool] = None
    triggers: Optional[List[str]] = None

    @field_validator("type")
    @classmethod
    def check_type(cls, value):
        return _check_type(value)
