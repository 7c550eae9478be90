"""Initial chat schema

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-10-18

This migration adds:
- rooms: per-phone conversation rooms with their live socket set
- users: phone-keyed users with their active socket binding
- messages: chat messages posted by sockets
- wati_messages: inbound WhatsApp messages from the WATI webhook
- contacts, responses, workspace_settings
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3f9a1c2b7d40'
down_revision = None
branch_labels = None
depends_on = None

EMPTY_TEXT_ARRAY = sa.text("'{}'::text[]")


def upgrade() -> None:
    op.create_table(
        'rooms',
        sa.Column('id', sa.String(24), primary_key=True),

        # Identity
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('phone', sa.Text(), nullable=False, unique=True),
        sa.Column('channel', sa.Text(), nullable=False),
        sa.Column('source', sa.Text(), nullable=False),
        sa.Column('created_from', sa.Text(), nullable=False, server_default='api'),
        sa.Column('metadata', postgresql.JSONB(), nullable=True, server_default='{}'),

        # Presence
        sa.Column('status', sa.Text(), nullable=False, server_default='open'),
        sa.Column('connected_sockets', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),

        # Contact link
        sa.Column('username', sa.Text(), nullable=True),
        sa.Column('contact_id', sa.String(24), nullable=True),
        sa.Column('tags', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),

        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_rooms_status', 'rooms', ['status'])
    op.create_index('idx_rooms_contact_id', 'rooms', ['contact_id'])
    op.create_index('idx_rooms_created', 'rooms', ['created_at'])
    op.create_index('idx_rooms_connected_sockets', 'rooms', ['connected_sockets'], postgresql_using='gin')

    op.create_table(
        'users',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('phone', sa.Text(), nullable=False, unique=True),
        sa.Column('role', sa.Text(), nullable=False, server_default='user'),
        sa.Column('rooms', postgresql.ARRAY(sa.String(24)), nullable=False, server_default=sa.text("'{}'::varchar[]")),

        # Connection state
        sa.Column('socket_id', sa.Text(), nullable=True),
        sa.Column('is_connected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('connected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('disconnected_at', sa.DateTime(timezone=True), nullable=True),

        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_users_socket_id', 'users', ['socket_id'])
    op.create_index('idx_users_created', 'users', ['created_at'])

    op.create_table(
        'messages',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('room_id', sa.String(24), sa.ForeignKey('rooms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', sa.Text(), nullable=False, server_default='text'),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('socket_id', sa.Text(), nullable=True),
        sa.Column('welcome', sa.Boolean(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('contact_id', sa.String(24), nullable=True),
        sa.Column('tags', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),
    )
    op.create_index('idx_messages_room_ts', 'messages', ['room_id', 'timestamp'])
    op.create_index('idx_messages_phone', 'messages', ['phone'])
    op.create_index('idx_messages_contact_id', 'messages', ['contact_id'])

    op.create_table(
        'wati_messages',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('message_id', sa.Text(), nullable=False, unique=True),
        sa.Column('conversation_id', sa.Text(), nullable=True),
        sa.Column('ticket_id', sa.Text(), nullable=True),
        sa.Column('room_id', sa.String(24), sa.ForeignKey('rooms.id', ondelete='SET NULL'), nullable=True),
        sa.Column('phone', sa.Text(), nullable=False),
        sa.Column('username', sa.Text(), nullable=True),
        sa.Column('message', sa.Text(), nullable=False, server_default=''),
        sa.Column('type_message', sa.Text(), nullable=False, server_default='text'),
        sa.Column('date', sa.Text(), nullable=False),
        sa.Column('contact_id', sa.String(24), nullable=True),
        sa.Column('tags', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_wati_messages_room_id', 'wati_messages', ['room_id'])
    op.create_index('idx_wati_messages_phone', 'wati_messages', ['phone'])
    op.create_index('idx_wati_messages_contact_id', 'wati_messages', ['contact_id'])

    op.create_table(
        'contacts',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('phone', sa.Text(), nullable=False, unique=True),
        sa.Column('username', sa.Text(), nullable=False, unique=True),
        sa.Column('source', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('tags', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_contacts_created', 'contacts', ['created_at'])

    op.create_table(
        'responses',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('atajo', sa.Text(), nullable=False, unique=True),
        sa.Column('text', sa.Text(), nullable=True),
        sa.Column('image', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('status', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('triggers', postgresql.ARRAY(sa.Text()), nullable=False, server_default=EMPTY_TEXT_ARRAY),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_responses_created', 'responses', ['created_at'])

    op.create_table(
        'workspace_settings',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('display_name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('welcome_message', sa.Text(), nullable=False),
        sa.Column('profile_image', sa.Text(), nullable=True),
        sa.Column('is_connected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('platform_link', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('workspace_settings')
    op.drop_index('idx_responses_created', table_name='responses')
    op.drop_table('responses')
    op.drop_index('idx_contacts_created', table_name='contacts')
    op.drop_table('contacts')
    op.drop_index('idx_wati_messages_contact_id', table_name='wati_messages')
    op.drop_index('idx_wati_messages_phone', table_name='wati_messages')
    op.drop_index('idx_wati_messages_room_id', table_name='wati_messages')
    op.drop_table('wati_messages')
    op.drop_index('idx_messages_contact_id', table_name='messages')
    op.drop_index('idx_messages_phone', table_name='messages')
    op.drop_index('idx_messages_room_ts', table_name='messages')
    op.drop_table('messages')
    op.drop_index('idx_users_created', table_name='users')
    op.drop_index('idx_users_socket_id', table_name='users')
    op.drop_table('users')
    op.drop_index('idx_rooms_connected_sockets', table_name='rooms')
    op.drop_index('idx_rooms_created', table_name='rooms')
    op.drop_index('idx_rooms_contact_id', table_name='rooms')
    op.drop_index('idx_rooms_status', table_name='rooms')
    op.drop_table('rooms')
