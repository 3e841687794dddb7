"""Document models for threaded commentary.

Three collections:
- Threads: one per (book, section) pair, listing its top-level comments
- Comments: adjacency list via parent_id (None for top-level comments)
- Reactions: one user's tagged response to one comment

Reactions are referenced by id from their comment, not contained in it,
so removing a comment must sweep reactions by target explicitly.
"""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any


# ==============================================================================
# Collection Names
# ==============================================================================

COLLECTION_PREFIX = "Commentary."

THREADS_COLLECTION = COLLECTION_PREFIX + "threads"
COMMENTS_COLLECTION = COLLECTION_PREFIX + "comments"
REACTIONS_COLLECTION = COLLECTION_PREFIX + "reactions"


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Thread:
    """Discussion scope for one (book, section) pair."""

    id: str
    book: str
    section: str
    top_level_comment_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Thread":
        """Create Thread from stored document."""
        return cls(
            id=doc["id"],
            book=doc["book"],
            section=doc["section"],
            top_level_comment_ids=list(doc.get("top_level_comment_ids") or []),
        )

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Comment:
    """A single post, either top-level (no parent) or a reply."""

    id: str
    author: str
    body: str
    thread_id: str
    parent_id: str | None = None
    reaction_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Comment":
        """Create Comment from stored document."""
        created_at = doc.get("created_at")
        return cls(
            id=doc["id"],
            author=doc["author"],
            body=doc["body"],
            thread_id=doc["thread_id"],
            parent_id=doc.get("parent_id"),
            reaction_ids=list(doc.get("reaction_ids") or []),
            created_at=(
                datetime.fromisoformat(created_at)
                if created_at
                else datetime.now(UTC)
            ),
        )

    def to_document(self) -> dict[str, Any]:
        doc = asdict(self)
        doc["created_at"] = self.created_at.isoformat()
        return doc


@dataclass
class Reaction:
    """A reactor's tagged response to a target comment."""

    id: str
    reactor: str
    target_comment_id: str
    type: str

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Reaction":
        """Create Reaction from stored document."""
        return cls(
            id=doc["id"],
            reactor=doc["reactor"],
            target_comment_id=doc["target_comment_id"],
            type=doc["type"],
        )

    def to_document(self) -> dict[str, Any]:
        return asdict(self)


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_comment(
    comment_id: str,
    author: str,
    body: str,
    thread_id: str,
    parent_id: str | None = None,
) -> Comment:
    """Create a new comment with no reactions."""
    return Comment(
        id=comment_id,
        author=author,
        body=body,
        thread_id=thread_id,
        parent_id=parent_id,
    )


def build_children_index(comments: list[Comment]) -> dict[str, list[str]]:
    """Map each parent comment id to the ids of its direct replies."""
    children: dict[str, list[str]] = {}
    for comment in comments:
        if comment.parent_id is not None:
            children.setdefault(comment.parent_id, []).append(comment.id)
    return children
