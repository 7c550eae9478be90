"""
Custom Exceptions for the Chat Backend.

Every error kind the backend surfaces derives from ChatBackendError, which
carries the HTTP status used by the API layer and a short `kind` tag used in
logs and socket payloads.
"""
from typing import Iterable, Optional


class ChatBackendError(Exception):
    """Base class for all domain errors."""
    kind = "Internal"
    status_code = 500

    def __init__(self, message: Optional[str] = None):
        self.message = message or "Internal server error"
        super().__init__(self.message)


class EntityNotFoundError(ChatBackendError):
    """
    Raised when a requested entity does not exist in the database.
    """
    kind = "NotFound"
    status_code = 404

    def __init__(self, entity_type: str, entity_id: Optional[str] = None, message: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message or f"{entity_type} not found")


class RoomNotFoundError(EntityNotFoundError):
    kind = "RoomNotFound"

    def __init__(self, room_id: Optional[str] = None):
        super().__init__("Room", room_id)


class InvalidIdError(ChatBackendError):
    kind = "InvalidId"
    status_code = 400

    def __init__(self, entity_type: str, value: Optional[str] = None):
        self.entity_type = entity_type
        self.value = value
        super().__init__(f"Invalid {entity_type.lower()} ID")


class MissingRequiredFieldError(ChatBackendError):
    """Raised when one or more required fields are absent or empty."""
    kind = "MissingRequiredField"
    status_code = 400

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message or f"Missing required fields: {', '.join(self.fields)}")


class ValidationFailedError(ChatBackendError):
    kind = "ValidationFailed"
    status_code = 400


class ConflictError(ChatBackendError):
    """
    Raised when a unique key (phone, username, atajo...) is already taken.
    """
    kind = "Conflict"
    status_code = 409


class PersistenceUnavailableError(ChatBackendError):
    """
    Raised when the database cannot be reached.

    Socket handlers recover from this locally (broadcast without persisting and
    warn the origin socket); HTTP handlers answer 503.
    """
    kind = "PersistenceUnavailable"
    status_code = 503

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Database not available")


class TransportError(ChatBackendError):
    kind = "TransportError"
    status_code = 500


class WebhookUnauthorizedError(ChatBackendError):
    kind = "Unauthorized"
    status_code = 401

    def __init__(self):
        super().__init__("Unauthorized webhook request")


class InternalError(ChatBackendError):
    kind = "Internal"
    status_code = 500
