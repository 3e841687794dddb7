"""Structlog configuration with console and optional file output.

This module configures structlog for structured logging with:
- Console output (colored or JSON)
- Optional rotating JSON file output
- Call context injection via contextvars
- Truncation of long free-text values (comment and message bodies)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor

from folio.core.context import get_context


if TYPE_CHECKING:
    from folio.config.settings import Settings


# Keys whose values are user-authored text and can be arbitrarily long
FREE_TEXT_KEYS = frozenset({"body", "text", "explanation"})


def add_context_processor(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add call context (actor_id, correlation_id, action) to log events."""
    for key, value in get_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def truncate_free_text(max_length: int) -> Processor:
    """Create a processor that shortens long free-text values.

    Args:
        max_length: Maximum number of characters kept per value.

    Returns:
        A processor function.
    """

    def processor(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key in FREE_TEXT_KEYS & event_dict.keys():
            value = event_dict[key]
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = value[:max_length] + "..."
        return event_dict

    return processor


def add_app_info_processor(app_name: str, environment: str) -> Processor:
    """Create a processor that adds application info to log events."""

    def processor(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["app"] = app_name
        event_dict["environment"] = environment
        return event_dict

    return processor


def setup_file_handler(
    log_dir: Path,
    log_file: str,
    max_bytes: int,
    backup_count: int,
    log_level: str,
) -> RotatingFileHandler:
    """Setup rotating file handler for logging."""
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_dir / log_file),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(getattr(logging, log_level.upper()))
    return handler


def setup_console_handler(log_level: str) -> logging.StreamHandler:
    """Setup console handler for logging."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, log_level.upper()))
    return handler


def build_shared_processors(settings: "Settings") -> list[Processor]:
    """Processors applied to both structlog and foreign (stdlib) records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        add_app_info_processor(settings.app_name, settings.environment),
        truncate_free_text(settings.log_max_value_length),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_include_caller_info:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    return processors


def configure_structlog(
    settings: "Settings",
    log_dir: Path | str | None = None,
) -> None:
    """Configure structlog with console and optional file output.

    Args:
        settings: Application settings.
        log_dir: Directory for log files. Defaults to ``settings.log_dir``.
    """
    log_level = settings.log_level
    log_dir = Path(log_dir if log_dir is not None else settings.log_dir)
    shared_processors = build_shared_processors(settings)

    if settings.log_format == "json":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    console_handler = setup_console_handler(log_level)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=final_processor,
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(console_handler)

    if settings.log_to_file:
        # Files are always JSON (for log analysis)
        for file_name, level in (
            (f"{settings.app_name}.log", log_level),
            (f"{settings.app_name}.error.log", "ERROR"),
        ):
            file_handler = setup_file_handler(
                log_dir=log_dir,
                log_file=file_name,
                max_bytes=settings.log_file_max_bytes,
                backup_count=settings.log_file_backup_count,
                log_level=level,
            )
            file_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.processors.JSONRenderer(),
                    foreign_pre_chain=shared_processors,
                )
            )
            root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Silence noisy loggers
    logging.getLogger("cassandra").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)
