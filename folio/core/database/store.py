"""Document storage interface.

The ``DocumentStore`` ABC is the pluggable persistence backend for every
concept. Concrete implementations (``InMemoryDocumentStore``,
``CassandraDocumentStore``) are interchangeable at construction time,
keeping concept services free of storage-specific code.

Documents are plain dicts keyed by ``id``. Filters passed to ``find``
follow document-database conventions:

    find(book="b1")                 field equals "b1", or list field contains it
    find(parent_id=None)            field absent or null
    find(target_comment_id=AnyOf(ids))  field equals any of ids
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any


Document = dict[str, Any]

# In-place edit of a document body
Change = Callable[[Document], None]

ID_FIELD = "id"


class DocumentExistsError(Exception):
    """Insert attempted with an id that is already stored."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document {doc_id} already exists in {collection}")


class DocumentConflictError(Exception):
    """A document kept changing underneath a read-modify-write."""

    def __init__(self, collection: str, doc_id: str, attempts: int):
        self.collection = collection
        self.doc_id = doc_id
        self.attempts = attempts
        super().__init__(
            f"Document {doc_id} in {collection} changed concurrently "
            f"{attempts} times in a row"
        )


class AnyOf:
    """Filter value matching any of the given values."""

    __slots__ = ("values",)

    def __init__(self, values: Iterable[Any]):
        self.values = frozenset(values)

    def __repr__(self) -> str:
        return f"AnyOf({sorted(map(str, self.values))})"


def matches_filters(document: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Check a document against equality / membership filters."""
    for field, expected in filters.items():
        actual = document.get(field)
        if isinstance(expected, AnyOf):
            if isinstance(actual, list):
                if expected.values.isdisjoint(actual):
                    return False
            elif actual not in expected.values:
                return False
        elif expected is None:
            if actual is not None:
                return False
        elif isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


class DocumentCollection(ABC):
    """Abstract repository for one named collection of documents."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    async def get(self, doc_id: str) -> Document | None:
        """Return the document with ``doc_id`` or None."""

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        """Store a new document. Raises DocumentExistsError on duplicate id."""

    @abstractmethod
    async def modify(self, doc_id: str, change: Change) -> bool:
        """Apply ``change`` to the stored document, atomically per document.

        ``change`` edits the document dict in place and may be called more
        than once if a concurrent writer gets in first. Returns False if the
        document does not exist.
        """

    @abstractmethod
    async def delete_many(self, doc_ids: Iterable[str]) -> int:
        """Delete every document whose id is in ``doc_ids``.

        Returns the number of documents that existed and were removed.
        """

    @abstractmethod
    async def find(self, **filters: Any) -> list[Document]:
        """Return matching documents in insertion order."""

    async def find_one(self, **filters: Any) -> Document | None:
        """Return the first matching document or None."""
        found = await self.find(**filters)
        return found[0] if found else None

    async def delete(self, doc_id: str) -> bool:
        """Delete a single document by id."""
        return await self.delete_many([doc_id]) > 0

    async def update_fields(self, doc_id: str, fields: Mapping[str, Any]) -> bool:
        """Overwrite the given top-level fields. Returns False if missing."""
        return await self.modify(doc_id, lambda document: document.update(fields))

    async def append_to_list(self, doc_id: str, field: str, value: Any) -> bool:
        """Append ``value`` to the list stored in ``field``."""

        def append(document: Document) -> None:
            document[field] = [*(document.get(field) or []), value]

        return await self.modify(doc_id, append)

    async def remove_from_list(self, doc_id: str, field: str, value: Any) -> bool:
        """Remove every occurrence of ``value`` from the list in ``field``."""

        def remove(document: Document) -> None:
            document[field] = [
                item for item in document.get(field) or [] if item != value
            ]

        return await self.modify(doc_id, remove)


class DocumentStore(ABC):
    """Abstract factory for named document collections."""

    @abstractmethod
    def collection(self, name: str) -> DocumentCollection:
        """Return the collection called ``name`` (created lazily)."""
