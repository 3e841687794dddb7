"""Commentary concept.

Provides section-scoped discussion with:
- One thread per (book, section), created on first comment
- Threaded replies (parent/child)
- Reactions (opaque tags, unique per reactor, comment and type)
- Cascading delete of replies and reactions
"""

from .models import (
    COMMENTS_COLLECTION,
    REACTIONS_COLLECTION,
    THREADS_COLLECTION,
    Comment,
    Reaction,
    Thread,
)
from .service import CommentaryService


__all__ = [
    "COMMENTS_COLLECTION",
    "REACTIONS_COLLECTION",
    "THREADS_COLLECTION",
    "Comment",
    "CommentaryService",
    "Reaction",
    "Thread",
]
