"""
Persistence Gateway

One unit of work per `async with gateway.session() as repos:` block. The block
commits when it exits cleanly and rolls back otherwise. Driver-level failures
are translated into the backend's error kinds so callers never see SQLAlchemy
exceptions:

- connectivity problems / timeouts -> PersistenceUnavailableError
- unique violations                -> ConflictError
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from roombridge.modules.contacts.repositories.contact_repository import ContactRepository
from roombridge.modules.messages.repositories.chat_message_repository import ChatMessageRepository
from roombridge.modules.messages.repositories.wati_message_repository import WatiMessageRepository
from roombridge.modules.responses.repositories.response_repository import ResponseRepository
from roombridge.modules.rooms.repositories.room_repository import RoomRepository
from roombridge.modules.users.repositories.user_repository import UserRepository
from roombridge.modules.workspace_settings.repositories.settings_repository import WorkspaceSettingsRepository
from roombridge.shared.utils.exceptions import ConflictError, PersistenceUnavailableError

logger = logging.getLogger(__name__)


class Repositories:
    """All repositories bound to one session (one transaction)."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.rooms = RoomRepository(db)
        self.users = UserRepository(db)
        self.chat_messages = ChatMessageRepository(db)
        self.wati_messages = WatiMessageRepository(db)
        self.contacts = ContactRepository(db)
        self.responses = ResponseRepository(db)
        self.workspace_settings = WorkspaceSettingsRepository(db)


class PersistenceGateway:
    """Shared, internally pooled access point to the database."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        try:
            async with self._session_factory() as db:
                try:
                    yield Repositories(db)
                    await db.commit()
                except BaseException:
                    await db.rollback()
                    raise
        except IntegrityError as e:
            logger.info(f"Unique constraint violated: {e.orig}")
            raise ConflictError("A record with the same unique key already exists") from e
        except (OperationalError, InterfaceError) as e:
            logger.warning(f"Database unavailable: {e}")
            raise PersistenceUnavailableError() from e
        except DBAPIError as e:
            if e.connection_invalidated:
                logger.warning(f"Database connection invalidated: {e}")
                raise PersistenceUnavailableError() from e
            raise
        except (OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Database unreachable: {e}")
            raise PersistenceUnavailableError() from e
