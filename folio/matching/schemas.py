"""Argument schemas for matching operations."""

from folio.core.actions import ID, ActionRequest


class FinishedBookRequest(ActionRequest):
    """Record that ``user`` finished ``book``."""

    user: ID
    book: ID


class GenerateMatchesRequest(ActionRequest):
    owner: ID
    book: ID


class MatchDecisionRequest(ActionRequest):
    """Accept or reject a match as one of its participants."""

    owner: ID
    match: ID


class ExplainMatchRequest(ActionRequest):
    requester: ID
    match: ID


class UserLookup(ActionRequest):
    user: ID
