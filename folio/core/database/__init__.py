"""Document storage for Folio concepts.

The Cassandra connection helpers live in ``folio.core.database.connection``
and are imported on demand, since they need the ``cassandra`` extra.
"""

from folio.core.database.cassandra import CassandraDocumentStore
from folio.core.database.ids import IdFactory, generate_id
from folio.core.database.memory import InMemoryDocumentStore
from folio.core.database.store import (
    AnyOf,
    Document,
    DocumentCollection,
    DocumentConflictError,
    DocumentExistsError,
    DocumentStore,
)


__all__ = [
    "AnyOf",
    "CassandraDocumentStore",
    "Document",
    "DocumentCollection",
    "DocumentConflictError",
    "DocumentExistsError",
    "DocumentStore",
    "IdFactory",
    "InMemoryDocumentStore",
    "generate_id",
]
