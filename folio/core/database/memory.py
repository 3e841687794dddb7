"""In-process document store for development and tests."""

import copy
from collections.abc import Iterable
from typing import Any

from .store import (
    ID_FIELD,
    Change,
    Document,
    DocumentCollection,
    DocumentExistsError,
    DocumentStore,
    matches_filters,
)


class InMemoryDocumentCollection(DocumentCollection):
    """Dict-backed collection. Documents are deep-copied in and out."""

    def __init__(self, name: str):
        super().__init__(name)
        self._documents: dict[str, Document] = {}

    async def get(self, doc_id: str) -> Document | None:
        document = self._documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def insert(self, document: Document) -> Document:
        doc_id = document[ID_FIELD]
        if doc_id in self._documents:
            raise DocumentExistsError(self.name, doc_id)
        self._documents[doc_id] = copy.deepcopy(document)
        return copy.deepcopy(document)

    async def modify(self, doc_id: str, change: Change) -> bool:
        document = self._documents.get(doc_id)
        if document is None:
            return False
        # Nothing awaits between read and write, so no other task interleaves
        updated = copy.deepcopy(document)
        change(updated)
        self._documents[doc_id] = copy.deepcopy(updated)
        return True

    async def delete_many(self, doc_ids: Iterable[str]) -> int:
        deleted = 0
        for doc_id in set(doc_ids):
            if self._documents.pop(doc_id, None) is not None:
                deleted += 1
        return deleted

    async def find(self, **filters: Any) -> list[Document]:
        return [
            copy.deepcopy(document)
            for document in self._documents.values()
            if matches_filters(document, filters)
        ]

    def __len__(self) -> int:
        return len(self._documents)


class InMemoryDocumentStore(DocumentStore):
    """Document store holding every collection in process memory."""

    def __init__(self) -> None:
        self._collections: dict[str, InMemoryDocumentCollection] = {}

    def collection(self, name: str) -> InMemoryDocumentCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryDocumentCollection(name)
        return self._collections[name]

    def clear(self) -> None:
        """Drop every collection."""
        self._collections.clear()
