"""
Canned Responses API Endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from roombridge.dependencies import get_response_service
from roombridge.modules.responses.schemas.response_schemas import CreateResponseRequest, UpdateResponseRequest
from roombridge.modules.responses.services.response_service import ResponseService

router = APIRouter()


@router.post("", status_code=201, summary="Create a canned response")
async def create_response(body: CreateResponseRequest, service: ResponseService = Depends(get_response_service)):
    return await service.create_response(body.model_dump())


@router.get("", summary="List canned responses")
async def list_responses(
    atajo: Optional[str] = Query(None, description="Case-insensitive partial match"),
    service: ResponseService = Depends(get_response_service),
):
    return await service.list_responses(atajo=atajo)


@router.get("/{response_id}")
async def get_response(response_id: str, service: ResponseService = Depends(get_response_service)):
    return await service.get_response(response_id)


@router.put("/{response_id}")
async def update_response(
    response_id: str,
    body: UpdateResponseRequest,
    service: ResponseService = Depends(get_response_service),
):
    return await service.update_response(response_id, body.model_dump(exclude_none=True))
