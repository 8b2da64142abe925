from __future__ import annotations

from .auth import CheckCodeRequest, CodeRequested, LoginResult, StartAuthRequest
from .chats import Chat, ChatSyncRequest, ChatsSnapshot, Contact, LastMessage, Name
from .fields import SchemaMismatch
from .messages import (
    Attachment,
    HistoryRequest,
    Message,
    MessageBuilder,
    MessageLink,
    SentMessage,
    parse_history,
)
from .reactions import (
    GetReactionsRequest,
    MessageReactions,
    ReactionCounter,
    RemoveReactionRequest,
    SetReactionRequest,
    parse_reaction_info,
    parse_reactions_map,
)
from .upload import (
    PhotoInfo,
    PhotoUploadErrorBody,
    PhotoUploadResult,
    UploadSlot,
    UploadSlotRequest,
)

__all__ = [
    "Attachment",
    "Chat",
    "ChatSyncRequest",
    "ChatsSnapshot",
    "CheckCodeRequest",
    "CodeRequested",
    "Contact",
    "GetReactionsRequest",
    "HistoryRequest",
    "LastMessage",
    "LoginResult",
    "Message",
    "MessageBuilder",
    "MessageLink",
    "MessageReactions",
    "Name",
    "PhotoInfo",
    "PhotoUploadErrorBody",
    "PhotoUploadResult",
    "ReactionCounter",
    "RemoveReactionRequest",
    "SchemaMismatch",
    "SentMessage",
    "SetReactionRequest",
    "StartAuthRequest",
    "UploadSlot",
    "UploadSlotRequest",
    "parse_history",
    "parse_reaction_info",
    "parse_reactions_map",
]
