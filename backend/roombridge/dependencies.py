"""
Application wiring.

One instance of each service per process, built around a single persistence
gateway and a single Socket.IO server. Endpoints receive them through the
get_* dependencies so tests can swap them with app.dependency_overrides.
"""
from roombridge.modules.contacts.services.contact_service import ContactService
from roombridge.modules.messages.services.message_pipeline import MessagePipeline
from roombridge.modules.messages.services.webhook_ingestor import WatiWebhookIngestor
from roombridge.modules.realtime.broadcast_bus import BroadcastBus
from roombridge.modules.realtime.socket_server import ChatSocketHandlers, create_socket_server
from roombridge.modules.responses.services.response_service import ResponseService
from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.modules.rooms.services.room_service import RoomService
from roombridge.modules.users.services.user_directory import UserDirectory
from roombridge.modules.workspace_settings.services.settings_service import WorkspaceSettingsService
from roombridge.shared.core.config import settings
from roombridge.shared.db.gateway import PersistenceGateway
from roombridge.shared.db.session import AsyncSessionLocal

# ============================================
# SINGLETONS
# ============================================

gateway = PersistenceGateway(AsyncSessionLocal)
sio = create_socket_server()
broadcast_bus = BroadcastBus(sio)

presence_store = PresenceStore(gateway)
user_directory = UserDirectory(gateway)
room_engine = RoomEngine(gateway, presence_store, user_directory, broadcast_bus)
message_pipeline = MessagePipeline(gateway, broadcast_bus)
webhook_ingestor = WatiWebhookIngestor(
    gateway,
    broadcast_bus,
    broadcast_inbound=settings.WATI_BROADCAST_INBOUND,
)
room_service = RoomService(gateway, user_directory)
contact_service = ContactService(gateway)
response_service = ResponseService(gateway)
settings_service = WorkspaceSettingsService(gateway)

socket_handlers = ChatSocketHandlers(room_engine, message_pipeline, broadcast_bus)
socket_handlers.register(sio)


# ============================================
# FASTAPI DEPENDENCIES
# ============================================

def get_presence_store() -> PresenceStore:
    return presence_store


def get_user_directory() -> UserDirectory:
    return user_directory


def get_room_engine() -> RoomEngine:
    return room_engine


def get_room_service() -> RoomService:
    return room_service


def get_message_pipeline() -> MessagePipeline:
    return message_pipeline


def get_webhook_ingestor() -> WatiWebhookIngestor:
    return webhook_ingestor


def get_contact_service() -> ContactService:
    return contact_service


def get_response_service() -> ResponseService:
    return response_service


def get_settings_service() -> WorkspaceSettingsService:
    return settings_service
