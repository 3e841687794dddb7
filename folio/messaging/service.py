"""Messaging service layer.

Business logic for:
- Starting chats between unblocked users
- Sending messages (participants only)
- Leaving chats
- Directional user blocks, which also pull the blocker out of shared chats
"""

from itertools import combinations

import structlog

from folio.config.settings import Settings, get_settings
from folio.core.actions import Result, action
from folio.core.database import DocumentStore, IdFactory, generate_id
from folio.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)

from .models import (
    BLOCKS_COLLECTION,
    CHATS_COLLECTION,
    MESSAGES_COLLECTION,
    Block,
    Chat,
    Message,
    unique_in_order,
)
from .schemas import (
    BlockUserRequest,
    ChatLookup,
    LeaveChatRequest,
    SendMessageRequest,
    StartChatRequest,
    UserLookup,
)


logger = structlog.get_logger(__name__)


class MessagingService:
    """Service for chats, messages and user blocks."""

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings | None = None,
        id_factory: IdFactory = generate_id,
    ):
        settings = settings or get_settings()
        self.chats = store.collection(CHATS_COLLECTION)
        self.messages = store.collection(MESSAGES_COLLECTION)
        self.blocks = store.collection(BLOCKS_COLLECTION)
        self.min_participants = settings.chat_min_participants
        self.id_factory = id_factory

    async def _require_chat(self, chat_id: str) -> Chat:
        doc = await self.chats.get(chat_id)
        if doc is None:
            raise NotFoundError(f"Chat with ID {chat_id} not found.")
        return Chat.from_document(doc)

    async def _has_blocked(self, blocker: str, blocked: str) -> bool:
        return await self.blocks.find_one(blocker=blocker, blocked=blocked) is not None

    # ==========================================================================
    # Actions
    # ==========================================================================

    @action(StartChatRequest)
    async def start_chat(self, request: StartChatRequest) -> Result:
        """Start a chat.

        Raises:
            InvalidInputError: Too few unique participants, or creator not
                among them
            ForbiddenError: A block exists (either direction) between any
                two participants
        """
        participants = unique_in_order(request.participants)
        if len(participants) < self.min_participants:
            raise InvalidInputError(
                f"Chat must have at least {self.min_participants} "
                "unique participants."
            )
        if request.creator not in participants:
            raise InvalidInputError("Creator must be one of the participants.")

        for first, second in combinations(participants, 2):
            if await self._has_blocked(first, second) or await self._has_blocked(
                second, first
            ):
                raise ForbiddenError(
                    f"Cannot start chat: A block exists between {first} and {second}."
                )

        chat = Chat(id=self.id_factory(), participants=participants)
        await self.chats.insert(chat.to_document())

        logger.info(
            "chat_started",
            chat_id=chat.id,
            creator=request.creator,
            participant_count=len(participants),
        )
        return {"chat": chat.id}

    @action(SendMessageRequest)
    async def send_message(self, request: SendMessageRequest) -> Result:
        chat = await self._require_chat(request.chat)
        if request.author not in chat.participants:
            raise ForbiddenError(
                f"Author {request.author} is not a participant in chat {chat.id}."
            )

        message = Message(
            id=self.id_factory(),
            chat_id=chat.id,
            author=request.author,
            body=request.body,
        )
        await self.messages.insert(message.to_document())
        await self.chats.append_to_list(chat.id, "message_ids", message.id)

        logger.info(
            "message_sent",
            message_id=message.id,
            chat_id=chat.id,
            author=request.author,
            body=request.body,
        )
        return {"message": message.id}

    @action(LeaveChatRequest)
    async def leave_chat(self, request: LeaveChatRequest) -> Result:
        chat = await self._require_chat(request.chat)
        if request.leaver not in chat.participants:
            raise NotFoundError(
                f"User {request.leaver} is not a participant in chat {chat.id}."
            )

        await self.chats.remove_from_list(chat.id, "participants", request.leaver)
        logger.info("chat_left", chat_id=chat.id, user=request.leaver)
        return {}

    @action(BlockUserRequest)
    async def block_user(self, request: BlockUserRequest) -> Result:
        """Block ``target`` and leave every chat shared with them."""
        if request.requester == request.target:
            raise InvalidInputError("Cannot block yourself.")
        if await self._has_blocked(request.requester, request.target):
            raise ConflictError(
                f"User {request.requester} has already blocked {request.target}."
            )

        block = Block(
            id=self.id_factory(), blocker=request.requester, blocked=request.target
        )
        await self.blocks.insert(block.to_document())

        shared = [
            doc
            for doc in await self.chats.find(participants=request.requester)
            if request.target in doc.get("participants", [])
        ]
        for doc in shared:
            await self.chats.remove_from_list(
                doc["id"], "participants", request.requester
            )

        logger.info(
            "user_blocked",
            blocker=request.requester,
            blocked=request.target,
            chats_left=len(shared),
        )
        return {}

    # ==========================================================================
    # Queries
    # ==========================================================================

    @action(ChatLookup)
    async def get_chat_messages(self, request: ChatLookup) -> Result:
        """Messages of a chat in the order they were sent."""
        chat = await self._require_chat(request.chat)
        docs = await self.messages.find(chat_id=chat.id)
        messages = sorted(
            (Message.from_document(doc) for doc in docs),
            key=lambda m: m.sent_at,
        )
        return {"messages": messages}

    @action(UserLookup)
    async def get_chats_for_user(self, request: UserLookup) -> Result:
        docs = await self.chats.find(participants=request.user)
        return {"chats": [doc["id"] for doc in docs]}

    @action(BlockUserRequest)
    async def is_blocked(self, request: BlockUserRequest) -> Result:
        """Whether ``requester`` has blocked ``target`` (one direction only)."""
        blocked = await self._has_blocked(request.requester, request.target)
        return {"is_blocked": blocked}
