"""
Messages Repositories
"""

from .chat_message_repository import ChatMessageRepository
from .wati_message_repository import WatiMessageRepository

__all__ = [
    "ChatMessageRepository",
    "WatiMessageRepository",
]
