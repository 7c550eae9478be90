"""
Messages Module - API Router
Combines the timeline and webhook routes for registration in main.py
"""
from fastapi import APIRouter
from roombridge.modules.messages.api import message_endpoints, webhook_endpoints

router = APIRouter()

router.include_router(
    message_endpoints.router,
    prefix="/messages",
    tags=["Messages"]
)

router.include_router(
    webhook_endpoints.router,
    prefix="/webhook",
    tags=["Webhooks"]
)
