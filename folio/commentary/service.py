"""Commentary service layer.

Lets readers comment on a section of a book, reply to comments, and
react to them. Business logic for:
- Lazy thread creation per (book, section)
- Threaded replies that inherit their parent's thread
- Reactions unique per (reactor, target, type)
- Cascading delete of a comment, its transitive replies and their reactions
"""

from collections import deque

import structlog

from folio.core.actions import Result, action
from folio.core.database import AnyOf, DocumentStore, IdFactory, generate_id
from folio.core.errors import DuplicateReactionError, ForbiddenError, NotFoundError

from .models import (
    COMMENTS_COLLECTION,
    REACTIONS_COLLECTION,
    THREADS_COLLECTION,
    Comment,
    Reaction,
    Thread,
    build_children_index,
    create_comment,
)
from .schemas import (
    CommentLookup,
    DeleteCommentRequest,
    PostCommentRequest,
    ReactRequest,
    ReplyRequest,
    ThreadLocator,
    ThreadLookup,
)


logger = structlog.get_logger(__name__)


class CommentaryService:
    """Service for section threads, comments and reactions."""

    def __init__(self, store: DocumentStore, id_factory: IdFactory = generate_id):
        """Initialize with a document store and identifier generator."""
        self.threads = store.collection(THREADS_COLLECTION)
        self.comments = store.collection(COMMENTS_COLLECTION)
        self.reactions = store.collection(REACTIONS_COLLECTION)
        self.id_factory = id_factory

    # ==========================================================================
    # Internal Helpers
    # ==========================================================================

    async def _find_thread(self, book: str, section: str) -> Thread | None:
        doc = await self.threads.find_one(book=book, section=section)
        return Thread.from_document(doc) if doc else None

    async def _get_or_create_thread(self, book: str, section: str) -> Thread:
        thread = await self._find_thread(book, section)
        if thread is not None:
            return thread

        thread = Thread(id=self.id_factory(), book=book, section=section)
        await self.threads.insert(thread.to_document())
        logger.info(
            "thread_created", thread_id=thread.id, book=book, section=section
        )
        return thread

    async def _load_comment(self, comment_id: str) -> Comment | None:
        doc = await self.comments.get(comment_id)
        return Comment.from_document(doc) if doc else None

    async def _collect_descendants(self, root: Comment) -> list[str]:
        """Return ``root`` plus every transitive reply, breadth-first.

        Replies never leave their parent's thread, so the parent -> children
        index is built from a single scan of the root's thread.
        """
        thread_comments = [
            Comment.from_document(doc)
            for doc in await self.comments.find(thread_id=root.thread_id)
        ]
        children = build_children_index(thread_comments)

        collected = [root.id]
        seen = {root.id}
        queue = deque([root.id])
        while queue:
            current = queue.popleft()
            for child_id in children.get(current, []):
                if child_id not in seen:
                    seen.add(child_id)
                    collected.append(child_id)
                    queue.append(child_id)
        return collected

    # ==========================================================================
    # Actions
    # ==========================================================================

    @action(PostCommentRequest)
    async def post_comment(self, request: PostCommentRequest) -> Result:
        """Post a top-level comment, creating the section thread if needed.

        Whether ``section`` belongs to ``book`` is the caller's concern.
        """
        thread = await self._get_or_create_thread(request.book, request.section)

        comment = create_comment(
            comment_id=self.id_factory(),
            author=request.author,
            body=request.body,
            thread_id=thread.id,
        )
        await self.comments.insert(comment.to_document())
        await self.threads.append_to_list(
            thread.id, "top_level_comment_ids", comment.id
        )

        logger.info(
            "comment_posted",
            comment_id=comment.id,
            thread_id=thread.id,
            author=request.author,
            body=request.body,
        )
        return {"comment": comment.id}

    @action(ReplyRequest)
    async def reply(self, request: ReplyRequest) -> Result:
        """Reply to a comment. The reply joins the parent's thread.

        The thread's top-level list is left untouched; replies are found
        through their parent pointer.
        """
        parent = await self._load_comment(request.parent)
        if parent is None:
            raise NotFoundError(f"Parent comment with ID {request.parent} not found.")

        comment = create_comment(
            comment_id=self.id_factory(),
            author=request.author,
            body=request.body,
            thread_id=parent.thread_id,
            parent_id=parent.id,
        )
        await self.comments.insert(comment.to_document())

        logger.info(
            "comment_replied",
            comment_id=comment.id,
            parent_id=parent.id,
            thread_id=parent.thread_id,
            author=request.author,
            body=request.body,
        )
        return {"comment": comment.id}

    @action(ReactRequest)
    async def react(self, request: ReactRequest) -> Result:
        """Attach a reaction to a comment.

        Raises:
            NotFoundError: If the target comment does not exist
            DuplicateReactionError: If the exact (reactor, target, type)
                triple already exists
        """
        target = await self._load_comment(request.target)
        if target is None:
            raise NotFoundError(f"Target comment with ID {request.target} not found.")

        existing = await self.reactions.find_one(
            reactor=request.reactor,
            target_comment_id=target.id,
            type=request.reaction_type,
        )
        if existing is not None:
            raise DuplicateReactionError(
                f"User {request.reactor} already reacted with type "
                f"{request.reaction_type} to comment {target.id}."
            )

        reaction = Reaction(
            id=self.id_factory(),
            reactor=request.reactor,
            target_comment_id=target.id,
            type=request.reaction_type,
        )
        await self.reactions.insert(reaction.to_document())
        await self.comments.append_to_list(target.id, "reaction_ids", reaction.id)

        logger.info(
            "reaction_added",
            reaction_id=reaction.id,
            comment_id=target.id,
            reactor=request.reactor,
            reaction_type=request.reaction_type,
        )
        return {"reaction": reaction.id}

    @action(DeleteCommentRequest)
    async def delete_comment(self, request: DeleteCommentRequest) -> Result:
        """Delete a comment, all of its transitive replies, and their reactions.

        Preconditions are checked before anything is written, so a rejected
        call leaves all state unchanged. The steps after that are not atomic
        across collections: reactions go first, then comments, then the
        thread's top-level list.
        """
        target = await self._load_comment(request.target)
        if target is None:
            raise NotFoundError(f"Comment with ID {request.target} not found.")
        if target.author != request.requestor:
            raise ForbiddenError(
                f"Requestor is not the author of comment {request.target}."
            )

        doomed = await self._collect_descendants(target)

        reaction_docs = await self.reactions.find(target_comment_id=AnyOf(doomed))
        reactions_deleted = await self.reactions.delete_many(
            doc["id"] for doc in reaction_docs
        )
        comments_deleted = await self.comments.delete_many(doomed)

        if target.is_top_level:
            await self.threads.remove_from_list(
                target.thread_id, "top_level_comment_ids", target.id
            )

        logger.info(
            "comment_deleted",
            comment_id=target.id,
            thread_id=target.thread_id,
            comments_deleted=comments_deleted,
            reactions_deleted=reactions_deleted,
        )
        return {}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @action(ThreadLocator)
    async def get_thread_comments(self, request: ThreadLocator) -> Result:
        """All comments of a section thread, flat (replies included)."""
        thread = await self._find_thread(request.book, request.section)
        if thread is None:
            return {"comments": []}

        docs = await self.comments.find(thread_id=thread.id)
        comments = sorted(
            (Comment.from_document(doc) for doc in docs),
            key=lambda c: c.created_at,
        )
        return {"comments": comments}

    @action(CommentLookup)
    async def get_comment_reactions(self, request: CommentLookup) -> Result:
        docs = await self.reactions.find(target_comment_id=request.comment)
        return {"reactions": [Reaction.from_document(doc) for doc in docs]}

    @action(CommentLookup)
    async def get_comment(self, request: CommentLookup) -> Result:
        return {"comment": await self._load_comment(request.comment)}

    @action(ThreadLookup)
    async def get_thread(self, request: ThreadLookup) -> Result:
        doc = await self.threads.get(request.thread)
        return {"thread": Thread.from_document(doc) if doc else None}

    @action(ThreadLocator)
    async def get_thread_by_book_and_section(self, request: ThreadLocator) -> Result:
        return {"thread": await self._find_thread(request.book, request.section)}
