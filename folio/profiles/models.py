"""Document model for reader profiles.

One document per owner (id = owner) holding the owner's interests and
reading history as ordered lists.
"""

from dataclasses import dataclass, field
from typing import Any


PROFILES_COLLECTION = "Profiles.profiles"


@dataclass
class Profile:
    """A reader's genres, books in progress and finished books."""

    owner: str
    genres: list[str] = field(default_factory=list)
    current_books: list[str] = field(default_factory=list)
    finished_books: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Profile":
        """Create Profile from stored document."""
        return cls(
            owner=doc["id"],
            genres=list(doc.get("genres") or []),
            current_books=list(doc.get("current_books") or []),
            finished_books=list(doc.get("finished_books") or []),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.owner,
            "genres": list(self.genres),
            "current_books": list(self.current_books),
            "finished_books": list(self.finished_books),
        }
