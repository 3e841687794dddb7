"""Identifier generation."""

from collections.abc import Callable
from uuid import uuid4


IdFactory = Callable[[], str]


def generate_id() -> str:
    """Return a fresh, globally unique opaque identifier."""
    return str(uuid4())
