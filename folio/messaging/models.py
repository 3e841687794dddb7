"""Document models for private messaging.

Three collections:
- Chats: participant list plus ordered message ids
- Messages: body text authored by one participant of one chat
- Blocks: directional (blocker -> blocked) user blocks
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


# ==============================================================================
# Collection Names
# ==============================================================================

COLLECTION_PREFIX = "Messaging."

CHATS_COLLECTION = COLLECTION_PREFIX + "chats"
MESSAGES_COLLECTION = COLLECTION_PREFIX + "messages"
BLOCKS_COLLECTION = COLLECTION_PREFIX + "blocks"


# ==============================================================================
# Entity Classes
# ==============================================================================


def _parse_datetime(value: str | None) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.now(UTC)


@dataclass
class Chat:
    """Conversation between two or more users."""

    id: str
    participants: list[str]
    message_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Chat":
        """Create Chat from stored document."""
        return cls(
            id=doc["id"],
            participants=list(doc.get("participants") or []),
            message_ids=list(doc.get("message_ids") or []),
            created_at=_parse_datetime(doc.get("created_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "participants": list(self.participants),
            "message_ids": list(self.message_ids),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Message:
    id: str
    chat_id: str
    author: str
    body: str
    sent_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Message":
        return cls(
            id=doc["id"],
            chat_id=doc["chat_id"],
            author=doc["author"],
            body=doc["body"],
            sent_at=_parse_datetime(doc.get("sent_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "author": self.author,
            "body": self.body,
            "sent_at": self.sent_at.isoformat(),
        }


@dataclass
class Block:
    """``blocker`` no longer wants contact with ``blocked``."""

    id: str
    blocker: str
    blocked: str
    blocked_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Block":
        return cls(
            id=doc["id"],
            blocker=doc["blocker"],
            blocked=doc["blocked"],
            blocked_at=_parse_datetime(doc.get("blocked_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "blocker": self.blocker,
            "blocked": self.blocked,
            "blocked_at": self.blocked_at.isoformat(),
        }


# ==============================================================================
# Helper Functions
# ==============================================================================


def unique_in_order(users: list[str]) -> list[str]:
    """Drop repeated users, keeping first occurrence order."""
    return list(dict.fromkeys(users))
