"""Folio - concept wiring.

Builds the document store selected by settings and the five concept
services on top of it, for use by an orchestration layer.
"""

from dataclasses import dataclass
from pathlib import Path

from folio.commentary import CommentaryService
from folio.config import Settings, get_settings
from folio.core.database import (
    CassandraDocumentStore,
    DocumentStore,
    InMemoryDocumentStore,
)
from folio.core.logging import configure_structlog, get_logger
from folio.library import LibraryService
from folio.matching import MatchingService
from folio.messaging import MessagingService
from folio.profiles import ProfilesService


logger = get_logger(__name__)


@dataclass
class Concepts:
    """Container for the concept services sharing one store."""

    store: DocumentStore
    commentary: CommentaryService
    library: LibraryService
    profiles: ProfilesService
    matching: MatchingService
    messaging: MessagingService


def build_concepts(store: DocumentStore, settings: Settings) -> Concepts:
    """Instantiate every concept service over ``store``."""
    return Concepts(
        store=store,
        commentary=CommentaryService(store),
        library=LibraryService(store),
        profiles=ProfilesService(store),
        matching=MatchingService(store, settings),
        messaging=MessagingService(store, settings),
    )


async def create_store(settings: Settings) -> DocumentStore:
    """Create the document store for ``settings.storage_backend``."""
    if settings.storage_backend == "cassandra":
        # Needs the ``cassandra`` extra
        from folio.core.database.connection import init_async_cassandra

        session = await init_async_cassandra(settings)
        logger.info("cassandra_initialized")
        return CassandraDocumentStore(session, settings.cassandra_keyspace)

    return InMemoryDocumentStore()


async def create_concepts(settings: Settings | None = None) -> Concepts:
    """Configure logging, open storage and build all concept services."""
    settings = settings or get_settings()
    configure_structlog(settings, log_dir=Path(settings.log_dir))

    logger.info(
        "starting_concepts",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend,
    )

    try:
        store = await create_store(settings)
    except Exception as e:
        logger.error("store_init_failed", error=str(e))
        raise

    concepts = build_concepts(store, settings)
    logger.info("concepts_initialized")
    return concepts


async def shutdown_concepts(settings: Settings | None = None) -> None:
    """Release storage connections."""
    settings = settings or get_settings()
    if settings.storage_backend == "cassandra":
        from folio.core.database.connection import shutdown_async_cassandra

        await shutdown_async_cassandra()
    logger.info("concepts_shutdown")
