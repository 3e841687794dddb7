"""Document models for reader matching.

Two collections:
- Finished books: when a user finished a book (one record per user/book)
- Matches: a suggested connection between two co-finishers of a book
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


# ==============================================================================
# Collection Names
# ==============================================================================

COLLECTION_PREFIX = "Matching."

FINISHED_BOOKS_COLLECTION = COLLECTION_PREFIX + "finishedBooks"
MATCHES_COLLECTION = COLLECTION_PREFIX + "matches"


# ==============================================================================
# Enums
# ==============================================================================


class MatchStatus(str, Enum):
    """Match lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


EXPLANATION_TEMPLATE = 'You and {other} both recently finished "{book}".'


# ==============================================================================
# Entity Classes
# ==============================================================================


def _parse_datetime(value: str | None) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.now(UTC)


@dataclass
class FinishedBook:
    """Record that a user finished a book at a point in time."""

    id: str
    user: str
    book: str
    finished_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "FinishedBook":
        return cls(
            id=doc["id"],
            user=doc["user"],
            book=doc["book"],
            finished_at=_parse_datetime(doc.get("finished_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user": self.user,
            "book": self.book,
            "finished_at": self.finished_at.isoformat(),
        }


@dataclass
class Match:
    """Suggested connection between two readers of the same book.

    ``user_a`` is the reader whose request generated the match. Both
    sides may accept or reject it.
    """

    id: str
    user_a: str
    user_b: str
    book: str
    status: MatchStatus = MatchStatus.PENDING
    explanation: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def participants(self) -> tuple[str, str]:
        return self.user_a, self.user_b

    def other_participant(self, user: str) -> str:
        return self.user_b if user == self.user_a else self.user_a

    def explain(self, requester: str) -> str:
        """Deterministic explanation addressed to ``requester``."""
        return EXPLANATION_TEMPLATE.format(
            other=self.other_participant(requester), book=self.book
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Match":
        """Create Match from stored document."""
        return cls(
            id=doc["id"],
            user_a=doc["user_a"],
            user_b=doc["user_b"],
            book=doc["book"],
            status=MatchStatus(doc.get("status", MatchStatus.PENDING.value)),
            explanation=doc.get("explanation"),
            created_at=_parse_datetime(doc.get("created_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_a": self.user_a,
            "user_b": self.user_b,
            "book": self.book,
            "status": self.status.value,
            "explanation": self.explanation,
            "created_at": self.created_at.isoformat(),
        }
