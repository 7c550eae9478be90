"""
Users API Endpoints
"""
from fastapi import APIRouter, Depends

from roombridge.dependencies import get_user_directory
from roombridge.modules.users.services.user_directory import UserDirectory

router = APIRouter()


@router.get("", summary="List users")
async def list_users(directory: UserDirectory = Depends(get_user_directory)):
    """All users, newest first, with their current socket binding."""
    return await directory.list_users()
