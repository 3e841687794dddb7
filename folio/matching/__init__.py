"""Matching concept: connect readers who recently finished the same book."""

from .models import FinishedBook, Match, MatchStatus
from .service import MatchingService


__all__ = [
    "FinishedBook",
    "Match",
    "MatchStatus",
    "MatchingService",
]
