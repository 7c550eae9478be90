"""
Webhook API Endpoints

- GET  /webhook              room-for-phone link used by external flows
- POST /webhook/webhook-wati inbound WhatsApp messages from WATI
"""
import logging
import secrets

from fastapi import APIRouter, Depends, Query, Request

from roombridge.dependencies import get_room_service, get_webhook_ingestor
from roombridge.modules.messages.services.webhook_ingestor import WatiWebhookIngestor
from roombridge.modules.rooms.services.room_service import RoomService
from roombridge.shared.core.config import settings
from roombridge.shared.utils.exceptions import ValidationFailedError, WebhookUnauthorizedError
from roombridge.shared.utils.request_utils import get_client_ip

router = APIRouter()
logger = logging.getLogger("wati_webhook")


# ============================================
# WEBHOOK SECURITY
# ============================================

def _is_ip_allowed(client_ip: str) -> bool:
    """Check if client IP is in the whitelist (if configured)."""
    whitelist = [ip.strip() for ip in settings.WATI_WEBHOOK_ALLOWED_IPS.split(",") if ip.strip()]
    # No whitelist configured: rely on token auth
    if not whitelist:
        return True
    return client_ip in whitelist


def verify_wati_webhook(request: Request) -> bool:
    """
    Verify WATI webhook authenticity.

    Security layers:
    1. IP whitelist (if WATI_WEBHOOK_ALLOWED_IPS is configured)
    2. Secret token (if WATI_WEBHOOK_SECRET is configured), sent as
       X-Webhook-Secret or Authorization: Bearer <token>
    """
    client_ip = get_client_ip(request)

    if not _is_ip_allowed(client_ip):
        logger.warning(f"Webhook rejected: IP {client_ip} not in whitelist")
        return False

    webhook_secret = settings.WATI_WEBHOOK_SECRET
    if not webhook_secret:
        logger.debug("WATI_WEBHOOK_SECRET not configured - webhook authentication disabled")
        return True

    provided_token = request.headers.get("X-Webhook-Secret") or request.headers.get("Authorization")
    if not provided_token:
        logger.warning(f"Webhook rejected: Missing authentication header from {client_ip}")
        return False

    if provided_token.startswith("Bearer "):
        provided_token = provided_token[7:]

    # Constant-time comparison
    if not secrets.compare_digest(provided_token, webhook_secret):
        logger.warning(f"Webhook rejected: Invalid secret token from {client_ip}")
        return False

    return True


# ============================================
# ENDPOINTS
# ============================================

@router.get("", summary="Get or create the room for a phone")
async def room_link(
    request: Request,
    phone: str = Query(..., min_length=1),
    channel: str = Query("whatsapp"),
    source: str = Query("webhook"),
    service: RoomService = Depends(get_room_service),
):
    """Returns the room plus `link`, the invite URL for the chat widget."""
    return await service.get_or_create_for_phone(
        phone=phone,
        channel=channel,
        source=source,
        user_agent=request.headers.get("User-Agent"),
        ip_address=get_client_ip(request),
    )


@router.post("/webhook-wati", summary="WATI inbound message webhook")
async def wati_webhook(request: Request, ingestor: WatiWebhookIngestor = Depends(get_webhook_ingestor)):
    if not verify_wati_webhook(request):
        logger.error(f"Unauthorized webhook attempt from {get_client_ip(request)}")
        raise WebhookUnauthorizedError()

    try:
        event_data = await request.json()
    except ValueError as e:
        logger.error(f"Invalid webhook JSON payload: {e}")
        raise ValidationFailedError("Invalid JSON payload")
    if not isinstance(event_data, dict):
        raise ValidationFailedError("Invalid JSON payload")

    logger.info(f"Webhook received: type={event_data.get('eventType', 'message')}, waId={event_data.get('waId')}")
    return await ingestor.ingest(event_data)
