"""
Messages Models
"""

from .chat_message import ChatMessage
from .wati_message import WatiMessage

__all__ = [
    "ChatMessage",
    "WatiMessage",
]
