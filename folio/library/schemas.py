"""Argument schemas for library and reading-progress operations."""

from pydantic import field_validator

from folio.core.actions import ID, ActionRequest


# ==============================================================================
# Action Schemas
# ==============================================================================


class RegisterBookStructureRequest(ActionRequest):
    """Define the ordered sections of a book."""

    book: ID
    sections: list[ID]

    @field_validator("sections")
    @classmethod
    def validate_sections(cls, v: list[str]) -> list[str]:
        """Sections must be non-empty and unique."""
        if not v:
            raise ValueError("Book must have at least one section")
        if len(set(v)) != len(v):
            raise ValueError("Sections must be unique")
        return v


class LibraryBookRequest(ActionRequest):
    """Add or remove a book in an owner's library."""

    owner: ID
    book: ID


class ReaderBookRequest(ActionRequest):
    """Reader acting on one of their books."""

    reader: ID
    book: ID


class JumpToRequest(ActionRequest):
    reader: ID
    book: ID
    section: ID


# ==============================================================================
# Query Schemas
# ==============================================================================


class OwnerLookup(ActionRequest):
    owner: ID


class BookLookup(ActionRequest):
    book: ID
