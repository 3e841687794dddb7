"""Library concept: owned books, book structures and reading progress."""

from .models import BookStructure, Library, ReadingProgress
from .service import LibraryService


__all__ = [
    "BookStructure",
    "Library",
    "LibraryService",
    "ReadingProgress",
]
