"""
Workspace Settings API Endpoints
"""
from fastapi import APIRouter, Depends

from roombridge.dependencies import get_settings_service
from roombridge.modules.workspace_settings.schemas.settings_schemas import SaveSettingsRequest
from roombridge.modules.workspace_settings.services.settings_service import WorkspaceSettingsService

router = APIRouter()


@router.post("", summary="Create or update the workspace profile")
async def save_settings(body: SaveSettingsRequest, service: WorkspaceSettingsService = Depends(get_settings_service)):
    values = body.model_dump()
    if values["timestamp"] is not None:
        values["timestamp"] = str(values["timestamp"])
    return await service.save_settings(values)


@router.get("", summary="Workspace profile")
async def get_settings(service: WorkspaceSettingsService = Depends(get_settings_service)):
    return await service.get_settings()
