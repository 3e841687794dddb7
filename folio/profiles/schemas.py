"""Argument schemas for profile operations."""

from folio.core.actions import ID, ActionRequest


class OwnerRequest(ActionRequest):
    owner: ID


class GenreRequest(ActionRequest):
    owner: ID
    genre: ID


class BookRequest(ActionRequest):
    owner: ID
    book: ID
