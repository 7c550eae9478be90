"""
Canned Response Service
CRUD for reusable reply templates, keyed by a unique `atajo`.
"""
import logging
from typing import List, Optional

from roombridge.shared.core.constants import RESPONSE_TYPES, RESPONSE_TYPES_REQUIRING_TEXT
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.utils.exceptions import ConflictError, EntityNotFoundError, ValidationFailedError
from roombridge.shared.utils.ids import require_object_id
from roombridge.shared.utils.time_utils import isoformat_utc

logger = logging.getLogger("response_service")


def serialize_response(response: dict) -> dict:
    return {
        "id": response["id"],
        "atajo": response["atajo"],
        "text": response.get("text"),
        "image": response.get("image") or "",
        "type": response["type"],
        "status": response.get("status", True),
        "triggers": list(response.get("triggers") or []),
        "createdAt": isoformat_utc(response.get("created_at")),
        "updatedAt": isoformat_utc(response.get("updated_at")),
    }


def validate_response_content(response_type: str, text: Optional[str]) -> None:
    if response_type not in RESPONSE_TYPES:
        raise ValidationFailedError(f"Invalid type. Must be one of: {', '.join(RESPONSE_TYPES)}")
    if response_type in RESPONSE_TYPES_REQUIRING_TEXT and not (text or "").strip():
        raise ValidationFailedError(f"Text is required for type '{response_type}'")


class ResponseService:

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    async def create_response(self, values: dict) -> dict:
        values = {**values, "image": values.get("image") or ""}
        validate_response_content(values["type"], values.get("text"))
        async with self.gateway.session() as repos:
            if await repos.responses.get_by_atajo(values["atajo"]):
                raise ConflictError("A response with this atajo already exists")
            response = await repos.responses.create_response(values)
        logger.info(f"Canned response {response['id']} created (atajo={response['atajo']})")
        return serialize_response(response)

    async def list_responses(self, atajo: Optional[str] = None) -> List[dict]:
        async with self.gateway.session() as repos:
            responses = await repos.responses.list_responses(atajo=atajo)
        return [serialize_response(r) for r in responses]

    async def get_response(self, response_id: str) -> dict:
        response_id = require_object_id(response_id, "Response")
        async with self.gateway.session() as repos:
            response = await repos.responses.get_by_id(response_id)
        if response is None:
            raise EntityNotFoundError("Response", response_id)
        return serialize_response(response)

    async def update_response(self, response_id: str, values: dict) -> dict:
        response_id = require_object_id(response_id, "Response")
        async with self.gateway.session() as repos:
            current = await repos.responses.get_by_id(response_id)
            if current is None:
                raise EntityNotFoundError("Response", response_id)

            merged = {**current, **values}
            validate_response_content(merged["type"], merged.get("text"))

            if values.get("atajo") and await repos.responses.get_by_atajo(values["atajo"], exclude_id=response_id):
                raise ConflictError("A response with this atajo already exists")
            response = await repos.responses.update_response(response_id, values) if values else current

        return serialize_response(response)
