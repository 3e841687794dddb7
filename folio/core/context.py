"""Call context management using contextvars.

An orchestration layer that drives several concept actions for one user
interaction can bind an actor and a correlation id once; every log line
emitted while those actions run will carry them.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4


actor_id_var: ContextVar[str | None] = ContextVar("actor_id", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
action_var: ContextVar[str | None] = ContextVar("action", default=None)


def generate_correlation_id() -> str:
    """Generate a new unique correlation ID."""
    return str(uuid4())


def get_actor_id() -> str | None:
    """Get the current actor (user) ID."""
    return actor_id_var.get()


def set_actor_id(actor_id: str | None) -> None:
    """Set the actor ID for the current context."""
    actor_id_var.set(actor_id)


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Optional ID. If not provided, generates a new one.

    Returns:
        The correlation ID that was set.
    """
    cid = correlation_id or generate_correlation_id()
    correlation_id_var.set(cid)
    return cid


def get_action() -> str | None:
    """Get the name of the concept action currently executing."""
    return action_var.get()


def get_context() -> dict[str, Any]:
    """Get all non-empty context variables as a dictionary."""
    context: dict[str, Any] = {}

    actor_id = get_actor_id()
    if actor_id:
        context["actor_id"] = actor_id

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    action = get_action()
    if action:
        context["action"] = action

    return context


def clear_context() -> None:
    """Clear all context variables."""
    actor_id_var.set(None)
    correlation_id_var.set(None)
    action_var.set(None)


class RequestContext:
    """Context manager for a scope of concept calls.

    Usage:
        with RequestContext(actor_id="user:alice"):
            await commentary.post_comment(...)  # logs include actor_id
    """

    def __init__(
        self,
        actor_id: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self.actor_id = actor_id
        self.correlation_id = correlation_id
        self._tokens: list[tuple[ContextVar[Any], Any]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens.append(
            (
                correlation_id_var,
                correlation_id_var.set(
                    self.correlation_id or generate_correlation_id()
                ),
            )
        )
        if self.actor_id is not None:
            self._tokens.append((actor_id_var, actor_id_var.set(self.actor_id)))
        return self

    def __exit__(self, *_: object) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
