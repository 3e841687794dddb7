"""Profiles service layer.

Business logic for:
- Profile creation (one per user)
- Favourite genres
- Current and finished books (a book is in at most one of the two lists)
"""

import structlog

from folio.core.actions import Result, action
from folio.core.database import DocumentStore
from folio.core.errors import ConflictError, NotFoundError, PreconditionError

from .models import PROFILES_COLLECTION, Profile
from .schemas import BookRequest, GenreRequest, OwnerRequest


logger = structlog.get_logger(__name__)


class ProfilesService:
    """Service for reader profiles."""

    def __init__(self, store: DocumentStore):
        self.profiles = store.collection(PROFILES_COLLECTION)

    async def _require_profile(self, owner: str) -> Profile:
        doc = await self.profiles.get(owner)
        if doc is None:
            raise NotFoundError(f"Profile for user {owner} not found.")
        return Profile.from_document(doc)

    # ==========================================================================
    # Actions
    # ==========================================================================

    @action(OwnerRequest)
    async def create_profile(self, request: OwnerRequest) -> Result:
        if await self.profiles.get(request.owner) is not None:
            raise ConflictError(f"Profile for user {request.owner} already exists.")

        await self.profiles.insert(Profile(owner=request.owner).to_document())
        logger.info("profile_created", owner=request.owner)
        return {}

    @action(GenreRequest)
    async def add_genre(self, request: GenreRequest) -> Result:
        profile = await self._require_profile(request.owner)
        if request.genre in profile.genres:
            raise ConflictError(
                f"Genre {request.genre} is already in user {request.owner}'s profile."
            )

        await self.profiles.append_to_list(request.owner, "genres", request.genre)
        logger.info("genre_added", owner=request.owner, genre=request.genre)
        return {}

    @action(GenreRequest)
    async def remove_genre(self, request: GenreRequest) -> Result:
        profile = await self._require_profile(request.owner)
        if request.genre not in profile.genres:
            raise NotFoundError(
                f"Genre {request.genre} is not in user {request.owner}'s profile."
            )

        await self.profiles.remove_from_list(request.owner, "genres", request.genre)
        logger.info("genre_removed", owner=request.owner, genre=request.genre)
        return {}

    @action(BookRequest)
    async def add_current_book(self, request: BookRequest) -> Result:
        profile = await self._require_profile(request.owner)
        if request.book in profile.current_books:
            raise ConflictError(
                f"Book {request.book} is already in user {request.owner}'s "
                "current books."
            )
        if request.book in profile.finished_books:
            raise ConflictError(
                f"Book {request.book} is already in user {request.owner}'s "
                "finished books."
            )

        await self.profiles.append_to_list(
            request.owner, "current_books", request.book
        )
        logger.info("current_book_added", owner=request.owner, book=request.book)
        return {}

    @action(BookRequest)
    async def remove_current_book(self, request: BookRequest) -> Result:
        profile = await self._require_profile(request.owner)
        if request.book not in profile.current_books:
            raise NotFoundError(
                f"Book {request.book} is not in user {request.owner}'s current books."
            )

        await self.profiles.remove_from_list(
            request.owner, "current_books", request.book
        )
        logger.info("current_book_removed", owner=request.owner, book=request.book)
        return {}

    @action(BookRequest)
    async def add_finished_book(self, request: BookRequest) -> Result:
        """Move a book from the owner's current books to finished books."""
        profile = await self._require_profile(request.owner)
        if request.book not in profile.current_books:
            raise PreconditionError(
                f"Book {request.book} is not in user {request.owner}'s current "
                "books, cannot mark as finished."
            )

        profile.current_books.remove(request.book)
        profile.finished_books.append(request.book)
        await self.profiles.update_fields(
            request.owner,
            {
                "current_books": profile.current_books,
                "finished_books": profile.finished_books,
            },
        )
        logger.info("finished_book_added", owner=request.owner, book=request.book)
        return {}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @action(OwnerRequest)
    async def get_profile(self, request: OwnerRequest) -> Result:
        doc = await self.profiles.get(request.owner)
        return {"profile": Profile.from_document(doc) if doc else None}

    @action(OwnerRequest)
    async def get_genres(self, request: OwnerRequest) -> Result:
        profile = await self._require_profile(request.owner)
        return {"genres": profile.genres}

    @action(OwnerRequest)
    async def get_current_books(self, request: OwnerRequest) -> Result:
        profile = await self._require_profile(request.owner)
        return {"current_books": profile.current_books}

    @action(OwnerRequest)
    async def get_finished_books(self, request: OwnerRequest) -> Result:
        profile = await self._require_profile(request.owner)
        return {"finished_books": profile.finished_books}
