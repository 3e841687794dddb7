"""Document models for personal libraries and reading progress.

Three collections:
- Libraries: one document per owner (id = owner), books in insertion order
- Book structures: one document per book (id = book), ordered sections
- Progress: one document per (reader, book) pair
"""

from dataclasses import asdict, dataclass, field
from typing import Any


# ==============================================================================
# Collection Names
# ==============================================================================

COLLECTION_PREFIX = "Library."

LIBRARIES_COLLECTION = COLLECTION_PREFIX + "libraries"
BOOK_STRUCTURES_COLLECTION = COLLECTION_PREFIX + "bookStructures"
PROGRESS_COLLECTION = COLLECTION_PREFIX + "progress"


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Library:
    """Books a user owns, keyed by owner."""

    owner: str
    books: list[str] = field(default_factory=list)

    def __contains__(self, book: str) -> bool:
        return book in self.books

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Library":
        return cls(owner=doc["id"], books=list(doc.get("books") or []))

    def to_document(self) -> dict[str, Any]:
        return {"id": self.owner, "books": list(self.books)}


@dataclass
class BookStructure:
    """Ordered sections making up a book."""

    book: str
    sections: list[str]

    @property
    def first_section(self) -> str:
        return self.sections[0]

    def next_after(self, section: str) -> str | None:
        """Section following ``section``, or None at the end or if unknown."""
        for index, candidate in enumerate(self.sections):
            if candidate == section:
                if index + 1 < len(self.sections):
                    return self.sections[index + 1]
                return None
        return None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "BookStructure":
        return cls(book=doc["id"], sections=list(doc.get("sections") or []))

    def to_document(self) -> dict[str, Any]:
        return {"id": self.book, "sections": list(self.sections)}


@dataclass
class ReadingProgress:
    """Where a reader currently is in a book."""

    id: str
    reader: str
    book: str
    current_place: str
    finished: bool = False

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ReadingProgress":
        """Create ReadingProgress from stored document."""
        return cls(
            id=doc["id"],
            reader=doc["reader"],
            book=doc["book"],
            current_place=doc["current_place"],
            finished=bool(doc.get("finished", False)),
        )

    def to_document(self) -> dict[str, Any]:
        return asdict(self)
