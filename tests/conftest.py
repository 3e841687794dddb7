"""Shared fixtures: in-memory store, test settings and concept services."""

from collections.abc import Iterator
from itertools import count

import pytest
import structlog

from folio.commentary import CommentaryService
from folio.config import Settings
from folio.core.context import clear_context
from folio.core.database import IdFactory, InMemoryDocumentStore
from folio.library import LibraryService
from folio.matching import MatchingService
from folio.messaging import MessagingService
from folio.profiles import ProfilesService


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, environment="testing", log_level="DEBUG")


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Fresh in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def id_factory() -> IdFactory:
    """Deterministic ids: id-1, id-2, ..."""
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture(autouse=True)
def reset_context() -> Iterator[None]:
    """Keep contextvars and structlog config from leaking between tests."""
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture
def commentary(
    store: InMemoryDocumentStore, id_factory: IdFactory
) -> CommentaryService:
    return CommentaryService(store, id_factory=id_factory)


@pytest.fixture
def library(store: InMemoryDocumentStore, id_factory: IdFactory) -> LibraryService:
    return LibraryService(store, id_factory=id_factory)


@pytest.fixture
def profiles(store: InMemoryDocumentStore) -> ProfilesService:
    return ProfilesService(store)


@pytest.fixture
def matching(
    store: InMemoryDocumentStore, settings: Settings, id_factory: IdFactory
) -> MatchingService:
    return MatchingService(store, settings, id_factory=id_factory)


@pytest.fixture
def messaging(
    store: InMemoryDocumentStore, settings: Settings, id_factory: IdFactory
) -> MessagingService:
    return MessagingService(store, settings, id_factory=id_factory)
