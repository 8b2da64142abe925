from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from .fields import obj_list, opt, req
from .reactions import MessageReactions


@dataclass(frozen=True, slots=True)
class Attachment:
    attachment_type: str
    token: str | None = None
    photo_token: str | None = None
    file_id: int | None = None
    name: str | None = None
    size: int | None = None
    base_url: str | None = None
    width: int | None = None
    height: int | None = None
    preview: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Attachment:
        return cls(
            attachment_type=req(d, "_type", str),
            token=opt(d, "token", str),
            photo_token=opt(d, "photoToken", str),
            file_id=opt(d, "fileId", int),
            name=opt(d, "name", str),
            size=opt(d, "size", int),
            base_url=opt(d, "baseUrl", str),
            width=opt(d, "width", int),
            height=opt(d, "height", int),
            preview=opt(d, "preview", dict),
        )


@dataclass(frozen=True, slots=True)
class MessageLink:
    """A reply or forward reference embedded in a fetched message."""

    link_type: str
    chat_id: int | None = None
    message: Message | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MessageLink:
        inner = opt(d, "message", dict)
        return cls(
            link_type=req(d, "type", str),
            chat_id=opt(d, "chatId", int),
            message=Message.from_dict(inner) if inner else None,
        )


@dataclass(frozen=True, slots=True)
class Message:
    sender: int
    id: str
    time: int
    text: str = ""
    message_type: str | None = None
    cid: int | None = None
    attaches: list[Attachment] = field(default_factory=list)
    reaction_info: MessageReactions | None = None
    link: MessageLink | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Message:
        reactions = opt(d, "reactionInfo", dict)
        link = opt(d, "link", dict)
        return cls(
            sender=req(d, "sender", int),
            id=req(d, "id", str),
            time=req(d, "time", int),
            text=opt(d, "text", str, ""),
            message_type=opt(d, "type", str),
            cid=opt(d, "cid", int),
            attaches=[Attachment.from_dict(a) for a in obj_list(d, "attaches", required=False)],
            reaction_info=MessageReactions.from_dict(reactions) if reactions else None,
            link=MessageLink.from_dict(link) if link else None,
        )


@dataclass(frozen=True, slots=True)
class HistoryRequest:
    chat_id: int
    from_time: int
    backward: int
    forward: int = 0
    get_messages: bool = True

    def to_payload(self) -> dict[str, Any]:
        return {
            "chatId": self.chat_id,
            "from": self.from_time,
            "forward": self.forward,
            "backward": self.backward,
            "getMessages": self.get_messages,
        }


def parse_history(payload: dict[str, Any]) -> list[Message]:
    return [Message.from_dict(m) for m in obj_list(payload, "messages")]


def now_ms() -> int:
    return int(time.time() * 1000)


class MessageBuilder:
    """
    Outgoing message under construction.

    `cid` is the client-side id the server echoes back; it is taken from the
    creation time in milliseconds.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self.cid = now_ms()
        self._elements: list[Any] = []
        self._attaches: list[dict[str, str]] = []
        self._link: dict[str, str] | None = None
        self._notify = True

    def text(self, text: str) -> MessageBuilder:
        self._text = text
        return self

    def reply_to(self, message_id: str) -> MessageBuilder:
        self._link = {"type": "REPLY", "messageId": str(message_id)}
        return self

    def image(self, photo_token: str) -> MessageBuilder:
        self._attaches.append({"_type": "PHOTO", "photoToken": photo_token})
        return self

    def silent(self) -> MessageBuilder:
        self._notify = False
        return self

    def to_payload(self, chat_id: int) -> dict[str, Any]:
        return {
            "chatId": chat_id,
            "message": {
                "text": self._text,
                "cid": self.cid,
                "elements": list(self._elements),
                "link": dict(self._link) if self._link else None,
                "attaches": [dict(a) for a in self._attaches],
            },
            "notify": self._notify,
        }


@dataclass(frozen=True, slots=True)
class SentMessage:
    chat_id: int
    message: Message

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SentMessage:
        return cls(
            chat_id=req(payload, "chatId", int),
            message=Message.from_dict(req(payload, "message", dict)),
        )
