"""Matching service layer.

When a reader finishes a book, other readers who finished the same book
around the same time are suggested as matches. Business logic for:
- Finished-book records
- Match generation (no duplicate pair per book, in either order)
- Accept / reject state transitions
- Deterministic match explanations
"""

from datetime import timedelta

import structlog

from folio.config.settings import Settings, get_settings
from folio.core.actions import Result, action
from folio.core.database import DocumentStore, IdFactory, generate_id
from folio.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
)

from .models import (
    FINISHED_BOOKS_COLLECTION,
    MATCHES_COLLECTION,
    FinishedBook,
    Match,
    MatchStatus,
)
from .schemas import (
    ExplainMatchRequest,
    FinishedBookRequest,
    GenerateMatchesRequest,
    MatchDecisionRequest,
    UserLookup,
)


logger = structlog.get_logger(__name__)


class MatchingService:
    """Service for co-finisher matching."""

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings | None = None,
        id_factory: IdFactory = generate_id,
    ):
        settings = settings or get_settings()
        self.finished_books = store.collection(FINISHED_BOOKS_COLLECTION)
        self.matches = store.collection(MATCHES_COLLECTION)
        self.recent_window = timedelta(days=settings.matching_recent_days)
        self.id_factory = id_factory

    async def _get_finished(self, user: str, book: str) -> FinishedBook | None:
        doc = await self.finished_books.find_one(user=user, book=book)
        return FinishedBook.from_document(doc) if doc else None

    async def _require_member_match(self, user: str, match_id: str) -> Match:
        """Load a match and check that ``user`` is one of its two sides."""
        doc = await self.matches.get(match_id)
        if doc is None:
            raise NotFoundError(f"Match {match_id} not found.")

        match = Match.from_document(doc)
        if user not in match.participants:
            raise ForbiddenError(f"User {user} is not part of match {match_id}.")
        return match

    async def _set_status(self, match: Match, status: MatchStatus) -> None:
        await self.matches.update_fields(match.id, {"status": status.value})
        logger.info(
            "match_status_changed",
            match_id=match.id,
            from_status=match.status.value,
            to_status=status.value,
        )
        match.status = status

    # ==========================================================================
    # Actions
    # ==========================================================================

    @action(FinishedBookRequest)
    async def record_finished_book(self, request: FinishedBookRequest) -> Result:
        if await self._get_finished(request.user, request.book) is not None:
            raise ConflictError(
                f"User {request.user} has already finished book {request.book}."
            )

        record = FinishedBook(
            id=self.id_factory(), user=request.user, book=request.book
        )
        await self.finished_books.insert(record.to_document())

        logger.info("finished_book_recorded", user=request.user, book=request.book)
        return {}

    @action(GenerateMatchesRequest)
    async def generate_matches(self, request: GenerateMatchesRequest) -> Result:
        """Suggest pending matches with recent co-finishers of ``book``.

        Returns only the matches created by this call. A pair that already
        has a match for the book, whatever its status, is skipped.
        """
        own = await self._get_finished(request.owner, request.book)
        if own is None:
            raise PreconditionError(
                f"User {request.owner} has not finished book {request.book}."
            )

        existing_pairs = {
            frozenset((doc["user_a"], doc["user_b"]))
            for doc in await self.matches.find(book=request.book)
        }

        suggested: list[Match] = []
        for doc in await self.finished_books.find(book=request.book):
            other = FinishedBook.from_document(doc)
            if other.user == request.owner:
                continue
            if abs(other.finished_at - own.finished_at) > self.recent_window:
                continue

            pair = frozenset((request.owner, other.user))
            if pair in existing_pairs:
                continue

            match = Match(
                id=self.id_factory(),
                user_a=request.owner,
                user_b=other.user,
                book=request.book,
            )
            await self.matches.insert(match.to_document())
            existing_pairs.add(pair)
            suggested.append(match)

        logger.info(
            "matches_generated",
            owner=request.owner,
            book=request.book,
            count=len(suggested),
        )
        return {"suggested": suggested}

    @action(MatchDecisionRequest)
    async def accept_match(self, request: MatchDecisionRequest) -> Result:
        match = await self._require_member_match(request.owner, request.match)
        if match.status is not MatchStatus.PENDING:
            raise PreconditionError(f"Match {match.id} is not in 'pending' status.")

        await self._set_status(match, MatchStatus.ACCEPTED)
        return {}

    @action(MatchDecisionRequest)
    async def reject_match(self, request: MatchDecisionRequest) -> Result:
        """Reject a pending or previously accepted match."""
        match = await self._require_member_match(request.owner, request.match)
        if match.status is MatchStatus.REJECTED:
            raise PreconditionError(f"Match {match.id} is already 'rejected'.")

        await self._set_status(match, MatchStatus.REJECTED)
        return {}

    @action(ExplainMatchRequest)
    async def explain_match(self, request: ExplainMatchRequest) -> Result:
        match = await self._require_member_match(request.requester, request.match)
        if match.status is not MatchStatus.ACCEPTED:
            raise PreconditionError(f"Match {match.id} is not in 'accepted' status.")

        explanation = match.explain(request.requester)
        await self.matches.update_fields(match.id, {"explanation": explanation})

        logger.info(
            "match_explained",
            match_id=match.id,
            requester=request.requester,
            explanation=explanation,
        )
        return {"explanation": explanation}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @action(UserLookup)
    async def get_matches_for_user(self, request: UserLookup) -> Result:
        """Matches in which ``user`` is on either side, oldest first."""
        docs = await self.matches.find(user_a=request.user)
        docs += await self.matches.find(user_b=request.user)
        matches = sorted(
            (Match.from_document(doc) for doc in docs),
            key=lambda m: m.created_at,
        )
        return {"matches": matches}
