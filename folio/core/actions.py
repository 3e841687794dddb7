"""Action boundary shared by every concept service.

Concept methods are invoked with keyword arguments and return either a
success record (a plain ``dict``) or the single-field error record
``{"error": message}``. The :func:`action` decorator validates the
keyword arguments against a pydantic request model, hands the model to
the wrapped coroutine, and converts :class:`ConceptError` raised inside
it into an error record.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, StringConstraints, ValidationError

from folio.core.context import action_var
from folio.core.errors import ConceptError, InvalidInputError


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


logger = structlog.get_logger(__name__)

# Opaque identifier (user, book, section, comment, ...)
ID = Annotated[str, StringConstraints(min_length=1)]

Result = dict[str, Any]

S = TypeVar("S")
R = TypeVar("R", bound="ActionRequest")


class ActionRequest(BaseModel):
    """Base model for action and query arguments."""

    model_config = ConfigDict(extra="forbid", frozen=True)


def error_record(message: str) -> Result:
    """Build the single-field error record."""
    return {"error": message}


def is_error(result: Result) -> bool:
    """Check whether a result record is an error record."""
    return "error" in result


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one message line."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "input"
        parts.append(f"{location}: {err['msg']}")
    return "Invalid input: " + "; ".join(parts)


def action(
    request_model: type[R],
) -> Callable[
    [Callable[[S, R], Awaitable[Result]]],
    Callable[..., Awaitable[Result]],
]:
    """Decorator turning a service coroutine into a concept action.

    Example:
        class PostCommentRequest(ActionRequest):
            author: ID
            body: str

        @action(PostCommentRequest)
        async def post_comment(self, request: PostCommentRequest) -> Result:
            ...

        await service.post_comment(author="u1", body="hi")
    """

    def decorator(
        func: Callable[[S, R], Awaitable[Result]],
    ) -> Callable[..., Awaitable[Result]]:
        name = func.__name__

        @functools.wraps(func)
        async def wrapper(self: S, **kwargs: Any) -> Result:
            token = action_var.set(name)
            try:
                try:
                    request = request_model.model_validate(kwargs)
                except ValidationError as e:
                    raise InvalidInputError(format_validation_error(e)) from e
                return await func(self, request)
            except ConceptError as e:
                logger.info(
                    "action_rejected",
                    action=name,
                    code=e.code,
                    error=e.message,
                )
                return error_record(e.message)
            finally:
                action_var.reset(token)

        wrapper.request_model = request_model  # type: ignore[attr-defined]
        return wrapper

    return decorator
