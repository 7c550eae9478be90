# backend/tests/conftest.py
"""
Shared fixtures for all test modules.
Service fixtures are plain objects built on the in-memory gateway; tests drive
them with asyncio.run() so no async fixtures are needed.
"""
from types import SimpleNamespace

import pytest

from roombridge.modules.contacts.services.contact_service import ContactService
from roombridge.modules.messages.services.message_pipeline import MessagePipeline
from roombridge.modules.messages.services.webhook_ingestor import WatiWebhookIngestor
from roombridge.modules.responses.services.response_service import ResponseService
from roombridge.modules.rooms.services.presence_store import PresenceStore
from roombridge.modules.rooms.services.room_engine import RoomEngine
from roombridge.modules.rooms.services.room_service import RoomService
from roombridge.modules.users.services.user_directory import UserDirectory
from roombridge.modules.workspace_settings.services.settings_service import WorkspaceSettingsService
from roombridge.shared.utils.ids import LocalMessageIdGenerator
from tests.fakes import FakeClock, InMemoryGateway, InMemoryStore, RecordingBus


# --- CORE FAKES ---
@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def gateway(store):
    return InMemoryGateway(store)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def clock():
    return FakeClock()


# --- SERVICE GRAPH ---
@pytest.fixture
def services(gateway, bus, clock):
    """Every service wired the way roombridge.dependencies wires them."""
    presence = PresenceStore(gateway, clock=clock)
    users = UserDirectory(gateway, clock=clock)
    return SimpleNamespace(
        gateway=gateway,
        bus=bus,
        clock=clock,
        presence=presence,
        users=users,
        engine=RoomEngine(gateway, presence, users, bus),
        pipeline=MessagePipeline(gateway, bus, clock=clock, id_generator=LocalMessageIdGenerator()),
        ingestor=WatiWebhookIngestor(gateway, bus, broadcast_inbound=False),
        rooms=RoomService(gateway, users, clock=clock),
        contacts=ContactService(gateway),
        responses=ResponseService(gateway),
        settings=WorkspaceSettingsService(gateway),
    )


# --- SAMPLE DATA FIXTURES ---
@pytest.fixture
def sample_wati_payload():
    """A WATI V1 inbound text message."""
    return {
        "id": "wamid.HBgNNTQ5MTE1NTU1MDAwMBUCABIYFjNFQjA",
        "eventType": "message",
        "waId": "5491155550000",
        "senderName": "Maria",
        "text": "Hola, quiero info",
        "type": "text",
        "timestamp": "1700000000",
        "conversationId": "conv-1",
        "ticketId": "ticket-1",
    }
