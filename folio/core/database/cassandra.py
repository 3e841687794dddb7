"""Cassandra-backed document store.

Every collection lives in a single ``documents`` table partitioned by
collection name. Document bodies are stored as JSON text; filtering is
done client-side after reading the collection partition, which keeps
the schema independent of the concepts built on top of it.

Updates are lightweight transactions conditional on the body that was
read, so concurrent list appends to one document never overwrite each
other.

Uses the ``aexecute()`` coroutine provided by cassandra-asyncio-driver
sessions (see ``folio.core.database.connection``).
"""

import json
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

from .store import (
    ID_FIELD,
    Change,
    Document,
    DocumentCollection,
    DocumentConflictError,
    DocumentExistsError,
    DocumentStore,
    matches_filters,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)

# Conditional update retries before giving up on a hot document
MAX_UPDATE_ATTEMPTS = 10


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition by collection so a filter query reads one partition
# Clustering by doc_id for O(1) lookups inside the partition
DOCUMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.documents (
    collection TEXT,
    doc_id TEXT,
    body TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((collection), doc_id)
) WITH CLUSTERING ORDER BY (doc_id ASC)
"""

DOCUMENT_TABLES_CQL = [DOCUMENTS_TABLE_CQL]


def encode_body(document: Mapping[str, Any]) -> str:
    """Serialize a document body to JSON text."""
    return json.dumps(document, separators=(",", ":"), sort_keys=True)


def decode_body(body: str | None) -> Document:
    """Deserialize a document body from JSON text."""
    return json.loads(body) if body else {}


def _sort_key(row: Any) -> tuple[datetime, str]:
    created_at = row.created_at or datetime.min
    if created_at.tzinfo is None:
        # Cassandra returns naive UTC datetimes
        created_at = created_at.replace(tzinfo=UTC)
    return created_at, row.doc_id


class CassandraDocumentCollection(DocumentCollection):
    """One collection (partition) of the shared documents table."""

    def __init__(self, name: str, store: "CassandraDocumentStore"):
        super().__init__(name)
        self.store = store

    @property
    def session(self) -> "Session":
        return self.store.session

    async def _read_body(self, doc_id: str) -> str | None:
        result = await self.session.aexecute(
            self.store.select_document, [self.name, doc_id]
        )
        row = result.one()
        return row.body if row else None

    async def get(self, doc_id: str) -> Document | None:
        body = await self._read_body(doc_id)
        return decode_body(body) if body is not None else None

    async def insert(self, document: Document) -> Document:
        doc_id = document[ID_FIELD]
        now = datetime.now(UTC)
        result = await self.session.aexecute(
            self.store.insert_document,
            [self.name, doc_id, encode_body(document), now, now],
        )
        if not result.was_applied:
            raise DocumentExistsError(self.name, doc_id)
        return document

    async def modify(self, doc_id: str, change: Change) -> bool:
        """Read-modify-write guarded by ``IF body = <body that was read>``.

        A lost race re-reads the row and applies ``change`` again.

        Raises:
            DocumentConflictError: If every attempt lost the race
        """
        for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
            body = await self._read_body(doc_id)
            if body is None:
                return False

            document = decode_body(body)
            change(document)
            result = await self.session.aexecute(
                self.store.update_document,
                [encode_body(document), datetime.now(UTC), self.name, doc_id, body],
            )
            if result.was_applied:
                return True

            logger.debug(
                "document_update_conflict",
                collection=self.name,
                doc_id=doc_id,
                attempt=attempt,
            )

        logger.warning(
            "document_update_gave_up",
            collection=self.name,
            doc_id=doc_id,
            attempts=MAX_UPDATE_ATTEMPTS,
        )
        raise DocumentConflictError(self.name, doc_id, MAX_UPDATE_ATTEMPTS)

    async def delete_many(self, doc_ids: Iterable[str]) -> int:
        ids = sorted(set(doc_ids))
        if not ids:
            return 0
        rows = await self.session.aexecute(self.store.select_ids, [self.name, ids])
        existing = sorted(row.doc_id for row in rows)
        if not existing:
            return 0
        await self.session.aexecute(self.store.delete_documents, [self.name, existing])
        logger.debug("documents_deleted", collection=self.name, count=len(existing))
        return len(existing)

    async def find(self, **filters: Any) -> list[Document]:
        rows = await self.session.aexecute(self.store.select_collection, [self.name])
        documents = []
        for row in sorted(rows, key=_sort_key):
            document = decode_body(row.body)
            if matches_filters(document, filters):
                documents.append(document)
        return documents


class CassandraDocumentStore(DocumentStore):
    """Document store over a Cassandra keyspace."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session and keyspace."""
        self.session = session
        self.keyspace = keyspace
        self._collections: dict[str, CassandraDocumentCollection] = {}
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self.select_document = self.session.prepare(f"""
            SELECT doc_id, body, created_at FROM {self.keyspace}.documents
            WHERE collection = ? AND doc_id = ?
        """)

        self.select_collection = self.session.prepare(f"""
            SELECT doc_id, body, created_at FROM {self.keyspace}.documents
            WHERE collection = ?
        """)

        self.insert_document = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.documents
            (collection, doc_id, body, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self.update_document = self.session.prepare(f"""
            UPDATE {self.keyspace}.documents
            SET body = ?, updated_at = ?
            WHERE collection = ? AND doc_id = ?
            IF body = ?
        """)

        self.select_ids = self.session.prepare(f"""
            SELECT doc_id FROM {self.keyspace}.documents
            WHERE collection = ? AND doc_id IN ?
        """)

        self.delete_documents = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.documents
            WHERE collection = ? AND doc_id IN ?
        """)

    def collection(self, name: str) -> CassandraDocumentCollection:
        if name not in self._collections:
            self._collections[name] = CassandraDocumentCollection(name, self)
        return self._collections[name]
