"""Argument schemas for commentary actions and queries."""

from pydantic import AliasChoices, Field

from folio.core.actions import ID, ActionRequest


# ==============================================================================
# Action Schemas
# ==============================================================================


class PostCommentRequest(ActionRequest):
    """Post a top-level comment on a book section."""

    author: ID
    book: ID
    section: ID
    body: str


class ReplyRequest(ActionRequest):
    """Reply to an existing comment."""

    author: ID
    parent: ID
    body: str


class ReactRequest(ActionRequest):
    """React to a comment with an opaque reaction tag."""

    reactor: ID
    target: ID
    reaction_type: ID = Field(validation_alias=AliasChoices("reaction_type", "type"))


class DeleteCommentRequest(ActionRequest):
    """Delete a comment together with its replies and reactions."""

    requestor: ID
    target: ID


# ==============================================================================
# Query Schemas
# ==============================================================================


class ThreadLocator(ActionRequest):
    book: ID
    section: ID


class CommentLookup(ActionRequest):
    comment: ID = Field(validation_alias=AliasChoices("comment", "commentId"))


class ThreadLookup(ActionRequest):
    thread: ID
