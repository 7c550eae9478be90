"""
Messages Module

Two message sources share one room timeline:
- chat messages posted by browser sockets
- WhatsApp messages delivered by the WATI webhook
"""

from .models.chat_message import ChatMessage
from .models.wati_message import WatiMessage

__all__ = [
    "ChatMessage",
    "WatiMessage",
]
