"""Messaging concept: private chats and user blocks."""

from .models import Block, Chat, Message
from .service import MessagingService


__all__ = [
    "Block",
    "Chat",
    "Message",
    "MessagingService",
]
