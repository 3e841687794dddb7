"""Library and reading-progress service layer.

Business logic for:
- Personal libraries (add/remove books)
- Book structures (ordered sections)
- Reading progress: open, advance, jump, finish and reset
"""

import structlog

from folio.core.actions import Result, action
from folio.core.database import DocumentStore, IdFactory, generate_id
from folio.core.errors import ConflictError, NotFoundError, PreconditionError

from .models import (
    BOOK_STRUCTURES_COLLECTION,
    LIBRARIES_COLLECTION,
    PROGRESS_COLLECTION,
    BookStructure,
    Library,
    ReadingProgress,
)
from .schemas import (
    BookLookup,
    JumpToRequest,
    LibraryBookRequest,
    OwnerLookup,
    ReaderBookRequest,
    RegisterBookStructureRequest,
)


logger = structlog.get_logger(__name__)


# ==============================================================================
# Error Messages
# ==============================================================================


def _not_in_library(owner: str, book: str) -> NotFoundError:
    return NotFoundError(f"Book {book} is not in user {owner}'s library.")


def _structure_not_found(book: str) -> NotFoundError:
    return NotFoundError(f"Book structure for {book} not found.")


def _no_progress(reader: str, book: str) -> NotFoundError:
    return NotFoundError(f"No reading progress found for user {reader} on book {book}.")


# ==============================================================================
# Library Service
# ==============================================================================


class LibraryService:
    """Service for libraries, book structures and reading progress."""

    def __init__(self, store: DocumentStore, id_factory: IdFactory = generate_id):
        self.libraries = store.collection(LIBRARIES_COLLECTION)
        self.book_structures = store.collection(BOOK_STRUCTURES_COLLECTION)
        self.progresses = store.collection(PROGRESS_COLLECTION)
        self.id_factory = id_factory

    async def _get_library(self, owner: str) -> Library | None:
        doc = await self.libraries.get(owner)
        return Library.from_document(doc) if doc else None

    async def _get_structure(self, book: str) -> BookStructure | None:
        doc = await self.book_structures.get(book)
        return BookStructure.from_document(doc) if doc else None

    async def _get_progress(self, reader: str, book: str) -> ReadingProgress | None:
        doc = await self.progresses.find_one(reader=reader, book=book)
        return ReadingProgress.from_document(doc) if doc else None

    async def _require_progress(self, reader: str, book: str) -> ReadingProgress:
        progress = await self._get_progress(reader, book)
        if progress is None:
            raise _no_progress(reader, book)
        return progress

    async def _require_in_library(self, owner: str, book: str) -> None:
        library = await self._get_library(owner)
        if library is None or book not in library:
            raise _not_in_library(owner, book)

    async def _save_place(
        self,
        reader: str,
        book: str,
        section: str,
        existing: ReadingProgress | None,
    ) -> ReadingProgress:
        """Point progress at ``section`` (not finished), creating it if needed."""
        if existing is None:
            progress = ReadingProgress(
                id=self.id_factory(),
                reader=reader,
                book=book,
                current_place=section,
            )
            await self.progresses.insert(progress.to_document())
            return progress

        await self.progresses.update_fields(
            existing.id, {"current_place": section, "finished": False}
        )
        existing.current_place = section
        existing.finished = False
        return existing

    # ==========================================================================
    # Book Structures
    # ==========================================================================

    @action(RegisterBookStructureRequest)
    async def register_book_structure(
        self, request: RegisterBookStructureRequest
    ) -> Result:
        """Define (or replace) the ordered sections of a book."""
        structure = BookStructure(book=request.book, sections=list(request.sections))

        replaced = await self.book_structures.update_fields(
            request.book, {"sections": structure.sections}
        )
        if not replaced:
            await self.book_structures.insert(structure.to_document())

        logger.info(
            "book_structure_registered",
            book=request.book,
            section_count=len(structure.sections),
            replaced=replaced,
        )
        return {}

    # ==========================================================================
    # Library Membership
    # ==========================================================================

    @action(LibraryBookRequest)
    async def add_to_library(self, request: LibraryBookRequest) -> Result:
        library = await self._get_library(request.owner)

        if library is None:
            library = Library(owner=request.owner, books=[request.book])
            await self.libraries.insert(library.to_document())
        elif request.book in library:
            raise ConflictError(
                f"Book {request.book} is already in user {request.owner}'s library."
            )
        else:
            await self.libraries.append_to_list(request.owner, "books", request.book)

        logger.info("book_added_to_library", owner=request.owner, book=request.book)
        return {}

    @action(LibraryBookRequest)
    async def remove_from_library(self, request: LibraryBookRequest) -> Result:
        """Remove a book and forget the owner's progress in it.

        The library document itself is dropped once it holds no books.
        """
        library = await self._get_library(request.owner)
        if library is None or request.book not in library:
            raise _not_in_library(request.owner, request.book)

        remaining = [book for book in library.books if book != request.book]
        if remaining:
            await self.libraries.update_fields(request.owner, {"books": remaining})
        else:
            await self.libraries.delete(request.owner)

        stale = await self.progresses.find(reader=request.owner, book=request.book)
        await self.progresses.delete_many(doc["id"] for doc in stale)

        logger.info(
            "book_removed_from_library",
            owner=request.owner,
            book=request.book,
            library_deleted=not remaining,
        )
        return {}

    # ==========================================================================
    # Reading Progress
    # ==========================================================================

    @action(ReaderBookRequest)
    async def open_book(self, request: ReaderBookRequest) -> Result:
        """Start reading at the first section, or resume where the reader was."""
        await self._require_in_library(request.reader, request.book)

        structure = await self._get_structure(request.book)
        if structure is None:
            raise _structure_not_found(request.book)

        progress = await self._get_progress(request.reader, request.book)
        if progress is None:
            progress = await self._save_place(
                request.reader, request.book, structure.first_section, None
            )
            logger.info(
                "book_opened",
                reader=request.reader,
                book=request.book,
                section=progress.current_place,
            )
        else:
            logger.info(
                "book_resumed",
                reader=request.reader,
                book=request.book,
                section=progress.current_place,
            )
        return {}

    @action(ReaderBookRequest)
    async def next_section(self, request: ReaderBookRequest) -> Result:
        progress = await self._require_progress(request.reader, request.book)

        structure = await self._get_structure(request.book)
        if structure is None:
            raise _structure_not_found(request.book)

        if progress.current_place not in structure.sections:
            # The structure was replaced after the reader's place was saved
            raise PreconditionError(
                f"Current section {progress.current_place} is no longer part of "
                f"book {request.book}. Use jump_to or reset_progress."
            )

        following = structure.next_after(progress.current_place)
        if following is None:
            raise PreconditionError(
                f"No subsequent section exists for book {request.book}. "
                "User is at the last section."
            )

        await self._save_place(request.reader, request.book, following, progress)
        logger.info(
            "section_advanced",
            reader=request.reader,
            book=request.book,
            section=following,
        )
        return {}

    @action(JumpToRequest)
    async def jump_to(self, request: JumpToRequest) -> Result:
        await self._require_in_library(request.reader, request.book)

        structure = await self._get_structure(request.book)
        if structure is None:
            raise _structure_not_found(request.book)
        if request.section not in structure.sections:
            raise NotFoundError(
                f"Section {request.section} does not belong to book {request.book}."
            )

        existing = await self._get_progress(request.reader, request.book)
        await self._save_place(request.reader, request.book, request.section, existing)

        logger.info(
            "section_jumped",
            reader=request.reader,
            book=request.book,
            section=request.section,
        )
        return {}

    @action(ReaderBookRequest)
    async def mark_finished(self, request: ReaderBookRequest) -> Result:
        progress = await self._require_progress(request.reader, request.book)
        if progress.finished:
            raise ConflictError(
                f"Book {request.book} is already marked as finished "
                f"for user {request.reader}."
            )

        await self.progresses.update_fields(progress.id, {"finished": True})
        logger.info("book_finished", reader=request.reader, book=request.book)
        return {}

    @action(ReaderBookRequest)
    async def reset_progress(self, request: ReaderBookRequest) -> Result:
        progress = await self._require_progress(request.reader, request.book)

        structure = await self._get_structure(request.book)
        if structure is None:
            raise _structure_not_found(request.book)

        await self._save_place(
            request.reader, request.book, structure.first_section, progress
        )
        logger.info("progress_reset", reader=request.reader, book=request.book)
        return {}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @action(OwnerLookup)
    async def get_library(self, request: OwnerLookup) -> Result:
        library = await self._get_library(request.owner)
        return {"books": list(library.books) if library else []}

    @action(ReaderBookRequest)
    async def get_progress(self, request: ReaderBookRequest) -> Result:
        progress = await self._require_progress(request.reader, request.book)
        return {"current_place": progress.current_place, "finished": progress.finished}

    @action(BookLookup)
    async def get_book_structure(self, request: BookLookup) -> Result:
        structure = await self._get_structure(request.book)
        if structure is None:
            raise _structure_not_found(request.book)
        return {"sections": list(structure.sections)}
