"""
Centralized Constants for the RoomBridge Chat Backend.
All hardcoded values should be defined here for easy maintenance.
"""
from datetime import timedelta, timezone

# ============================================
# PAGINATION
# ============================================
DEFAULT_PAGE_SIZE = 20          # Rooms, contacts
DEFAULT_MESSAGES_PAGE_SIZE = 50  # Timeline reads
MAX_PAGE_SIZE = 200
JOIN_HISTORY_LIMIT = 200        # Timeline entries replayed to a socket on join-room

# ============================================
# ROOM / USER STATES
# ============================================
ROOM_STATUS_OPEN = "open"
ROOM_STATUS_CLOSED = "closed"

DEFAULT_USER_ROLE = "user"
UNKNOWN_ROLE = "unknown"

# ============================================
# MESSAGES
# ============================================
DEFAULT_MESSAGE_TYPE = "text"
SOURCE_CHAT = "chat"
SOURCE_WHATSAPP = "whatsapp"
ANONYMOUS_USERNAME_PREFIX = "User-"
ANONYMOUS_USERNAME_SID_CHARS = 6

# WATI timestamps are stored in Argentina time (fixed UTC-3, no DST)
WATI_TIMEZONE = timezone(timedelta(hours=-3))

# ============================================
# CANNED RESPONSES
# ============================================
RESPONSE_TYPES = ("text", "image", "mixed")
RESPONSE_TYPES_REQUIRING_TEXT = ("text", "mixed")

# ============================================
# WORKSPACE SETTINGS
# ============================================
WORKSPACE_SETTINGS_ID = "68f3e4f06bf3bb05a68d898f"  # Singleton document

# ============================================
# SOCKET EVENTS
# ============================================
EVENT_JOIN_ROOM = "join-room"
EVENT_CHAT_MESSAGE = "chat-message"
EVENT_ROOM_USERS = "room-users"
EVENT_ERROR = "error"
EVENT_WARNING = "warning"
EVENT_DISCONNECTED = "disconnected"

# ============================================
# DATABASE POOL SETTINGS
# ============================================
DB_POOL_SIZE = 5
DB_MAX_OVERFLOW = 10
DB_POOL_RECYCLE = 300
