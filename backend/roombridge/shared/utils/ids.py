"""
Document ID helpers.

All persisted entities use 24-char lowercase hex ids (the ObjectId shape the
frontend already knows).
"""
import re
import secrets
import threading
import time

from roombridge.shared.utils.exceptions import InvalidIdError

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    return secrets.token_hex(12)


def is_valid_object_id(value: str) -> bool:
    return bool(value) and isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def require_object_id(value: str, entity_type: str = "Room") -> str:
    """Return the id lowercased, or raise InvalidIdError."""
    if not is_valid_object_id(value):
        raise InvalidIdError(entity_type, value)
    return value.lower()


class LocalMessageIdGenerator:
    """
    Ids for messages broadcast without being persisted.

    Normally the current epoch milliseconds as a string; when two calls land in
    the same millisecond the id is bumped to last + 1 so ids never repeat
    within a process.
    """

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = int(time.time() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


local_message_ids = LocalMessageIdGenerator()
