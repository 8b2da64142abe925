from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .fields import SchemaMismatch, obj_list, opt, req


@dataclass(frozen=True, slots=True)
class ReactionCounter:
    reaction: str
    count: int

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ReactionCounter:
        return cls(reaction=req(d, "reaction", str), count=req(d, "count", int))


@dataclass(frozen=True, slots=True)
class MessageReactions:
    counters: list[ReactionCounter] = field(default_factory=list)
    your_reaction: str | None = None
    total_count: int | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MessageReactions:
        return cls(
            counters=[ReactionCounter.from_dict(c) for c in obj_list(d, "counters", required=False)],
            your_reaction=opt(d, "yourReaction", str),
            total_count=opt(d, "totalCount", int),
        )


@dataclass(frozen=True, slots=True)
class GetReactionsRequest:
    chat_id: int
    message_ids: list[str]

    def to_payload(self) -> dict[str, Any]:
        return {"chatId": self.chat_id, "messageIds": [str(m) for m in self.message_ids]}


@dataclass(frozen=True, slots=True)
class SetReactionRequest:
    chat_id: int
    message_id: str
    emoji: str
    reaction_type: str = "EMOJI"

    def to_payload(self) -> dict[str, Any]:
        return {
            "chatId": self.chat_id,
            "messageId": str(self.message_id),
            "reaction": {"reactionType": self.reaction_type, "id": self.emoji},
        }


@dataclass(frozen=True, slots=True)
class RemoveReactionRequest:
    chat_id: int
    message_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"chatId": self.chat_id, "messageId": str(self.message_id)}


def parse_reactions_map(payload: dict[str, Any]) -> dict[str, MessageReactions]:
    raw = req(payload, "messagesReactions", dict)
    out: dict[str, MessageReactions] = {}
    for message_id, info in raw.items():
        if not isinstance(info, dict):
            raise SchemaMismatch(f"reactions for message {message_id!r} are not an object")
        out[message_id] = MessageReactions.from_dict(info)
    return out


def parse_reaction_info(payload: dict[str, Any]) -> MessageReactions | None:
    """
    Reply to set/remove reaction.

    The `reactionInfo` key must be present; its value is null or `{}` after a
    removal, which maps to None.
    """

    if "reactionInfo" not in payload:
        raise SchemaMismatch("missing field 'reactionInfo'")
    info = payload["reactionInfo"]
    if info is None or info == {}:
        return None
    if not isinstance(info, dict):
        raise SchemaMismatch("field 'reactionInfo' is not an object")
    return MessageReactions.from_dict(info)
