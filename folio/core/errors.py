"""Error taxonomy shared by every concept.

Concept services raise these internally; the ``@action`` boundary turns
them into ``{"error": message}`` records for callers.
"""


class ConceptError(Exception):
    """Base concept error."""

    def __init__(self, message: str, code: str = "concept_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(ConceptError):
    """Referenced entity does not exist."""

    def __init__(self, message: str = "Not found."):
        super().__init__(message, "not_found")


class ForbiddenError(ConceptError):
    """Actor lacks permission for the operation."""

    def __init__(self, message: str = "Forbidden."):
        super().__init__(message, "forbidden")


class ConflictError(ConceptError):
    """Uniqueness violation (entity or membership already exists)."""

    def __init__(self, message: str = "Already exists.", code: str = "conflict"):
        super().__init__(message, code)


class DuplicateReactionError(ConflictError):
    """The (reactor, target, type) triple already exists."""

    def __init__(self, message: str = "Reaction already exists."):
        super().__init__(message, "duplicate_reaction")


class PreconditionError(ConceptError):
    """Entity exists but is not in a state that permits the operation."""

    def __init__(self, message: str = "Precondition failed."):
        super().__init__(message, "precondition_failed")


class InvalidInputError(ConceptError):
    """Arguments did not pass validation."""

    def __init__(self, message: str = "Invalid input."):
        super().__init__(message, "invalid_input")
