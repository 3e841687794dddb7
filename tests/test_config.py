"""Tests for settings and concept wiring."""

import logging

import pytest

from folio.commentary import CommentaryService
from folio.config import Settings, get_settings
from folio.core.database import InMemoryDocumentStore
from folio.main import build_concepts, create_concepts, shutdown_concepts


class TestSettings:
    """Tests for Settings defaults and environment loading."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.app_name == "folio"
        assert settings.storage_backend == "memory"
        assert settings.cassandra_keyspace == "folio"
        assert settings.matching_recent_days == 30
        assert settings.chat_min_participants == 2
        assert settings.is_development

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("FOLIO_ENVIRONMENT", "production")
        monkeypatch.setenv("FOLIO_CASSANDRA_HOSTS", '["db1", "db2"]')
        monkeypatch.setenv("FOLIO_MATCHING_RECENT_DAYS", "7")

        settings = Settings(_env_file=None)

        assert settings.is_production
        assert settings.cassandra_hosts == ["db1", "db2"]
        assert settings.matching_recent_days == 7

    @pytest.mark.parametrize(
        "overrides",
        [
            {"storage_backend": "mongo"},
            {"chat_min_participants": 1},
            {"matching_recent_days": -1},
            {"log_format": "xml"},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            Settings(_env_file=None, **overrides)

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestWiring:
    """Tests for building the concept container."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_build_concepts_shares_store(self, settings):
        store = InMemoryDocumentStore()

        concepts = build_concepts(store, settings)

        assert concepts.store is store
        assert isinstance(concepts.commentary, CommentaryService)
        assert concepts.messaging.min_participants == settings.chat_min_participants

    @pytest.mark.asyncio
    async def test_create_concepts_with_memory_backend(self, settings, tmp_path):
        settings = settings.model_copy(update={"log_dir": str(tmp_path)})

        concepts = await create_concepts(settings)

        assert isinstance(concepts.store, InMemoryDocumentStore)
        await shutdown_concepts(settings)
