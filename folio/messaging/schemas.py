"""Argument schemas for messaging operations."""

from folio.core.actions import ID, ActionRequest


# ==============================================================================
# Action Schemas
# ==============================================================================


class StartChatRequest(ActionRequest):
    """Open a chat. ``participants`` may contain repeats; they are collapsed."""

    creator: ID
    participants: list[ID]


class SendMessageRequest(ActionRequest):
    chat: ID
    author: ID
    body: str


class LeaveChatRequest(ActionRequest):
    chat: ID
    leaver: ID


class BlockUserRequest(ActionRequest):
    requester: ID
    target: ID


# ==============================================================================
# Query Schemas
# ==============================================================================


class ChatLookup(ActionRequest):
    chat: ID


class UserLookup(ActionRequest):
    user: ID
