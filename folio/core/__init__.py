# Core infrastructure
from folio.core.actions import ID, ActionRequest, Result, action, is_error
from folio.core.context import (
    RequestContext,
    clear_context,
    get_actor_id,
    get_context,
    get_correlation_id,
    set_actor_id,
    set_correlation_id,
)
from folio.core.errors import (
    ConceptError,
    ConflictError,
    DuplicateReactionError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    PreconditionError,
)
from folio.core.logging import configure_structlog, get_logger


__all__ = [
    "ID",
    "ActionRequest",
    "ConceptError",
    "ConflictError",
    "DuplicateReactionError",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "PreconditionError",
    "RequestContext",
    "Result",
    "action",
    "clear_context",
    "configure_structlog",
    "get_actor_id",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "is_error",
    "set_actor_id",
    "set_correlation_id",
]
