"""
Alembic Environment Configuration

- Reads DATABASE_URL from the environment (.env supported)
- Imports every ORM model so autogenerate sees the full schema
"""
import os
import sys
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context
from dotenv import load_dotenv

load_dotenv()

# Make the roombridge package importable when alembic runs from backend/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ============================================
# MODELS (required for autogenerate)
# ============================================
from roombridge.shared.db.base import Base
from roombridge.modules.rooms.models.room import Room
from roombridge.modules.users.models.user import User
from roombridge.modules.messages.models.chat_message import ChatMessage
from roombridge.modules.messages.models.wati_message import WatiMessage
from roombridge.modules.contacts.models.contact import Contact
from roombridge.modules.responses.models.canned_response import CannedResponse
from roombridge.modules.workspace_settings.models.workspace_settings import WorkspaceSettings

config = context.config

DATABASE_URL = os.environ.get("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set!")

# Alembic runs on a sync driver: asyncpg URL -> psycopg2 URL
SYNC_DATABASE_URL = DATABASE_URL.replace(
    "postgresql+asyncpg://",
    "postgresql+psycopg2://"
).replace(
    "postgresql://",
    "postgresql+psycopg2://"
)
config.set_main_option("sqlalchemy.url", SYNC_DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without connecting (alembic upgrade --sql)."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
