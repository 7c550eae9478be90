"""
Shared Utility Functions
"""
from roombridge.shared.utils.exceptions import (
    ChatBackendError,
    ConflictError,
    EntityNotFoundError,
    InvalidIdError,
    MissingRequiredFieldError,
    PersistenceUnavailableError,
    RoomNotFoundError,
)
from roombridge.shared.utils.ids import new_object_id, require_object_id, local_message_ids
from roombridge.shared.utils.time_utils import utc_now, isoformat_utc, to_epoch_ms, wati_timestamp_to_iso

__all__ = [
    "ChatBackendError",
    "ConflictError",
    "EntityNotFoundError",
    "InvalidIdError",
    "MissingRequiredFieldError",
    "PersistenceUnavailableError",
    "RoomNotFoundError",
    # Ids
    "new_object_id",
    "require_object_id",
    "local_message_ids",
    # Time
    "utc_now",
    "isoformat_utc",
    "to_epoch_ms",
    "wati_timestamp_to_iso",
]
