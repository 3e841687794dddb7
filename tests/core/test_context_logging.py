"""Tests for call context and structlog configuration."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest
import structlog

from folio.config import Settings
from folio.core.context import (
    RequestContext,
    action_var,
    clear_context,
    get_actor_id,
    get_context,
    get_correlation_id,
    set_actor_id,
    set_correlation_id,
)
from folio.core.logging import (
    add_app_info_processor,
    add_context_processor,
    configure_structlog,
    truncate_free_text,
)


# ==============================================================================
# Context Tests
# ==============================================================================


class TestContext:
    """Tests for contextvars helpers."""

    def test_empty_context(self):
        """Test nothing is reported when no context is set."""
        assert get_context() == {}

    def test_set_and_get(self):
        set_actor_id("user:alice")
        cid = set_correlation_id("corr-1")

        assert cid == "corr-1"
        assert get_actor_id() == "user:alice"
        assert get_context() == {"actor_id": "user:alice", "correlation_id": "corr-1"}

    def test_set_correlation_id_generates_when_missing(self):
        """Test a fresh id is generated if none is given."""
        cid = set_correlation_id()

        assert cid
        assert get_correlation_id() == cid

    def test_clear_context(self):
        set_actor_id("user:alice")
        set_correlation_id("corr-1")
        action_var.set("post_comment")

        clear_context()

        assert get_context() == {}

    def test_request_context_scopes_values(self):
        """Test RequestContext sets values and restores previous ones."""
        set_actor_id("user:outer")

        with RequestContext(actor_id="user:inner", correlation_id="c-9"):
            assert get_actor_id() == "user:inner"
            assert get_correlation_id() == "c-9"

        assert get_actor_id() == "user:outer"
        assert get_correlation_id() is None

    def test_request_context_generates_correlation_id(self):
        with RequestContext() as ctx:
            assert get_correlation_id() is not None
            assert ctx.actor_id is None


# ==============================================================================
# Processor Tests
# ==============================================================================


class TestProcessors:
    """Tests for custom structlog processors."""

    def test_context_processor_adds_context(self):
        with RequestContext(actor_id="user:alice", correlation_id="c-1"):
            event = add_context_processor(None, "info", {"event": "x"})

        assert event["actor_id"] == "user:alice"
        assert event["correlation_id"] == "c-1"

    def test_context_processor_keeps_explicit_values(self):
        """Test explicitly bound keys win over context."""
        with RequestContext(actor_id="user:alice"):
            event = add_context_processor(None, "info", {"actor_id": "user:bob"})

        assert event["actor_id"] == "user:bob"

    def test_truncate_free_text(self):
        """Test long bodies are cut and other keys untouched."""
        processor = truncate_free_text(5)
        event = processor(
            None,
            "info",
            {"body": "abcdefgh", "text": "abc", "comment_id": "abcdefgh"},
        )

        assert event["body"] == "abcde..."
        assert event["text"] == "abc"
        assert event["comment_id"] == "abcdefgh"

    def test_app_info(self):
        processor = add_app_info_processor("folio", "testing")

        assert processor(None, "info", {}) == {"app": "folio", "environment": "testing"}


# ==============================================================================
# Configuration Tests
# ==============================================================================


class TestConfigureStructlog:
    """Tests for configure_structlog."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_console_only(self, settings: Settings, tmp_path):
        """Test default config installs a single console handler."""
        configure_structlog(settings, log_dir=tmp_path)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("cassandra").level == logging.WARNING

    def test_file_handlers(self, tmp_path):
        """Test log_to_file adds rotating main and error log files."""
        settings = Settings(
            _env_file=None,
            environment="testing",
            log_to_file=True,
            log_format="json",
            log_level="INFO",
        )

        configure_structlog(settings, log_dir=tmp_path)

        file_handlers = [
            h
            for h in logging.getLogger().handlers
            if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 2
        assert sorted(h.level for h in file_handlers) == [logging.INFO, logging.ERROR]
        assert (tmp_path / "folio.log").exists()
        assert (tmp_path / "folio.error.log").exists()

        for handler in file_handlers:
            handler.close()

    def test_file_log_truncates_long_bodies(self, tmp_path):
        """Test a long comment body is cut in the JSON log file."""
        settings = Settings(
            _env_file=None,
            environment="testing",
            log_to_file=True,
            log_format="json",
            log_level="INFO",
            log_max_value_length=10,
        )
        configure_structlog(settings, log_dir=tmp_path)

        structlog.get_logger("folio.tests").info(
            "comment_posted", comment_id="c1", body="x" * 50
        )

        for handler in logging.getLogger().handlers:
            handler.flush()
            if isinstance(handler, RotatingFileHandler):
                handler.close()
        [line] = (tmp_path / "folio.log").read_text().splitlines()
        record = json.loads(line)
        assert record["event"] == "comment_posted"
        assert record["body"] == "x" * 10 + "..."
        assert record["comment_id"] == "c1"
