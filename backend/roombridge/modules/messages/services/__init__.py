"""
Messages Services
"""
from roombridge.modules.messages.services.message_pipeline import MessagePipeline
from roombridge.modules.messages.services.webhook_ingestor import WatiWebhookIngestor

__all__ = [
    "MessagePipeline",
    "WatiWebhookIngestor",
]
