from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_CHATS_COUNT
from .fields import SchemaMismatch, obj_list, opt, req
from .messages import Attachment


@dataclass(frozen=True, slots=True)
class ChatSyncRequest:
    token: str
    chats_count: int = DEFAULT_CHATS_COUNT
    interactive: bool = True
    chats_sync: int = 0
    contacts_sync: int = 0
    presence_sync: int = 0
    drafts_sync: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "interactive": self.interactive,
            "token": self.token,
            "chatsSync": self.chats_sync,
            "contactsSync": self.contacts_sync,
            "presenceSync": self.presence_sync,
            "draftsSync": self.drafts_sync,
            "chatsCount": self.chats_count,
        }


@dataclass(frozen=True, slots=True)
class Name:
    name: str
    first_name: str | None = None
    last_name: str | None = None
    name_type: str | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Name:
        return cls(
            name=req(d, "name", str),
            first_name=opt(d, "firstName", str),
            last_name=opt(d, "lastName", str),
            name_type=opt(d, "type", str),
        )


@dataclass(frozen=True, slots=True)
class Contact:
    id: int
    names: list[Name] = field(default_factory=list)
    phone: int | None = None
    account_status: int | None = None
    link: str | None = None
    update_time: int | None = None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Contact:
        return cls(
            id=req(d, "id", int),
            names=[Name.from_dict(n) for n in obj_list(d, "names", required=False)],
            phone=opt(d, "phone", int),
            account_status=opt(d, "accountStatus", int),
            link=opt(d, "link", str),
            update_time=opt(d, "updateTime", int),
        )

    @property
    def display_name(self) -> str | None:
        return self.names[0].name if self.names else None


@dataclass(frozen=True, slots=True)
class LastMessage:
    sender: int
    id: str
    time: int
    text: str = ""
    message_type: str | None = None
    attaches: list[Attachment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LastMessage:
        return cls(
            sender=req(d, "sender", int),
            id=req(d, "id", str),
            time=req(d, "time", int),
            text=opt(d, "text", str, ""),
            message_type=opt(d, "type", str),
            attaches=[Attachment.from_dict(a) for a in obj_list(d, "attaches", required=False)],
        )


@dataclass(frozen=True, slots=True)
class Chat:
    id: int
    chat_type: str
    status: str | None = None
    owner: int | None = None
    title: str | None = None
    description: str | None = None
    cid: int | None = None
    created: int | None = None
    modified: int | None = None
    last_event_time: int | None = None
    participants: dict[str, int] = field(default_factory=dict)
    last_message: LastMessage | None = None
    options: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Chat:
        last = opt(d, "lastMessage", dict)
        return cls(
            id=req(d, "id", int),
            chat_type=req(d, "type", str),
            status=opt(d, "status", str),
            owner=opt(d, "owner", int),
            title=opt(d, "title", str),
            description=opt(d, "description", str),
            cid=opt(d, "cid", int),
            created=opt(d, "created", int),
            modified=opt(d, "modified", int),
            last_event_time=opt(d, "lastEventTime", int),
            participants=dict(opt(d, "participants", dict, {}) or {}),
            last_message=LastMessage.from_dict(last) if last else None,
            options=dict(opt(d, "options", dict, {}) or {}),
        )


@dataclass(frozen=True, slots=True)
class ChatsSnapshot:
    """
    Successful chat sync.

    The full reply is kept in `raw`; drafts, folders and server config are not
    modelled.
    """

    user_id: int
    chats: list[Chat]
    contacts: list[Contact] = field(default_factory=list)
    presence: dict[str, int] = field(default_factory=dict)
    chat_marker: int | None = None
    time: int | None = None
    token: str | None = None
    profile: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ChatsSnapshot:
        chats = [Chat.from_dict(c) for c in obj_list(payload, "chats")]
        profile = req(payload, "profile", dict)
        user_id = _profile_user_id(profile)

        presence: dict[str, int] = {}
        for uid, info in (opt(payload, "presence", dict, {}) or {}).items():
            if isinstance(info, dict) and isinstance(info.get("seen"), int):
                presence[uid] = info["seen"]

        return cls(
            user_id=user_id,
            chats=chats,
            contacts=[Contact.from_dict(c) for c in obj_list(payload, "contacts", required=False)],
            presence=presence,
            chat_marker=opt(payload, "chatMarker", int),
            time=opt(payload, "time", int),
            token=opt(payload, "token", str),
            profile=profile,
            raw=payload,
        )


def _profile_user_id(profile: dict[str, Any]) -> int:
    # Login replies nest the account under `contact`; older sync replies put `id` at the top.
    contact = profile.get("contact")
    if isinstance(contact, dict):
        return req(contact, "id", int)
    if "id" in profile:
        return req(profile, "id", int)
    raise SchemaMismatch("missing field 'profile.contact.id'")
