from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from .auth.flow import AuthFlow
from .auth.session import Session
from .auth.store import FileTokenStore, TokenStore
from .constants import (
    DEFAULT_CHATS_COUNT,
    DEFAULT_HISTORY_WINDOW_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_SESSION_FILE,
    Opcode,
)
from .envelope import ErrorPayload, unwrap
from .exceptions import ProtocolShapeError, SessionAbsentError, UploadSlotError
from .media import PhotoUploader, UploadConfig
from .schema.auth import LoginResult
from .schema.chats import ChatsSnapshot
from .schema.messages import (
    HistoryRequest,
    Message,
    MessageBuilder,
    SentMessage,
    now_ms,
    parse_history,
)
from .schema.reactions import (
    GetReactionsRequest,
    MessageReactions,
    RemoveReactionRequest,
    SetReactionRequest,
    parse_reaction_info,
    parse_reactions_map,
)
from .socket import MaxSocket
from .socket_config import SocketConfig
from .util.console import prompt_verification_code
from .util.events import Listener

logger = logging.getLogger(__name__)

CodeProvider = Callable[[], Awaitable[str]]


@dataclass(slots=True)
class ClientConfig:
    socket: SocketConfig = field(default_factory=SocketConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    language: str = DEFAULT_LANGUAGE
    chats_count: int = DEFAULT_CHATS_COUNT


class MaxClient:
    """
    High-level async client facade.

    One client owns one `Session` and one `MaxSocket`. Every operation connects
    first if there is no open connection, then performs a single request/reply
    exchange. Nothing is retried.
    """

    def __init__(
        self,
        *,
        config: ClientConfig | None = None,
        session: Session | None = None,
        token_store: TokenStore | None = None,
        socket: MaxSocket | None = None,
        uploader: PhotoUploader | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.session = session or Session()
        self.token_store = token_store
        self.socket = socket or MaxSocket(config=self.config.socket)
        self.uploader = uploader or PhotoUploader(self.config.upload)
        self.auth = AuthFlow(
            self.socket,
            self.session,
            language=self.config.language,
            chats_count=self.config.chats_count,
        )

    @classmethod
    async def from_token_file(
        cls, path: str | Path = DEFAULT_SESSION_FILE, *, config: ClientConfig | None = None
    ) -> tuple[MaxClient, bool]:
        """
        Build a client backed by a token file and try to restore its session.

        Returns `(client, restored)`; `restored` is False when the file holds no
        token or the server did not accept it.
        """

        store = FileTokenStore(path)
        client = cls(config=config, token_store=store)
        token = await store.load()
        if token is None:
            logger.info("no saved session in %s", store.path)
            return client, False
        return client, await client.restore_session(token)

    async def __aenter__(self) -> MaxClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def connect(self) -> None:
        await self.socket.connect()

    async def ensure_connected(self) -> None:
        await self.socket.ensure_connected()

    async def disconnect(self) -> None:
        await self.socket.close()

    async def close(self) -> None:
        await self.socket.close()
        await self.uploader.aclose()

    def on(self, event: str, listener: Listener) -> None:
        self.socket.events.on(event, listener)

    # -- authentication ----------------------------------------------------

    async def start_auth(self, phone: str) -> str:
        return await self.auth.start_auth(phone)

    async def submit_code(self, verification_token: str, code: str) -> LoginResult:
        login = await self.auth.submit_code(verification_token, code)
        if self.token_store is not None:
            await self.token_store.save(login.bearer_token)
        return login

    async def login(
        self, phone: str, code_provider: CodeProvider = prompt_verification_code
    ) -> LoginResult:
        """Full phone login: request a code, wait for `code_provider`, check it."""

        verification_token = await self.start_auth(phone)
        code = await code_provider()
        return await self.submit_code(verification_token, code)

    async def restore_session(self, bearer_token: str) -> bool:
        return await self.auth.restore_session(bearer_token)

    async def save_token(self) -> None:
        if self.token_store is None:
            raise RuntimeError("client has no token store")
        if self.session.bearer_token is None:
            raise SessionAbsentError("nothing to save: not authenticated")
        await self.token_store.save(self.session.bearer_token)

    # -- chats & messages --------------------------------------------------

    async def get_chats(self, token: str | None = None) -> ChatsSnapshot:
        token = token or self.session.bearer_token
        if not token:
            raise SessionAbsentError("no auth token; authenticate or restore a session first")
        outcome = await self.socket.chat_sync(token, chats_count=self.config.chats_count)
        snapshot = unwrap(outcome, opcode=Opcode.CHAT_SYNC)
        if not self.session.is_authenticated or self.session.bearer_token != token:
            self.session.authenticate(bearer_token=token, user_id=snapshot.user_id)
        return snapshot

    async def get_messages(
        self, chat_id: int, *, from_time: int | None = None, backward: int = 50
    ) -> list[Message]:
        """
        Fetch up to `backward` messages older than `from_time` (epoch ms).

        Without `from_time` the window starts nine hours before now.
        """

        if from_time is None:
            from_time = now_ms() - DEFAULT_HISTORY_WINDOW_MS
        req = HistoryRequest(chat_id=chat_id, from_time=from_time, backward=backward)
        outcome = await self.socket.exchange(Opcode.FETCH_HISTORY, req.to_payload(), parse_history)
        return unwrap(outcome, opcode=Opcode.FETCH_HISTORY)

    async def send_message(self, chat_id: int, message: MessageBuilder | str) -> SentMessage:
        if isinstance(message, str):
            message = MessageBuilder(message)
        outcome = await self.socket.exchange(
            Opcode.SEND_MESSAGE, message.to_payload(chat_id), SentMessage.from_payload
        )
        return unwrap(outcome, opcode=Opcode.SEND_MESSAGE)

    # -- reactions ---------------------------------------------------------

    async def get_message_reactions(
        self, chat_id: int, message_ids: list[str]
    ) -> dict[str, MessageReactions]:
        req = GetReactionsRequest(chat_id=chat_id, message_ids=message_ids)
        outcome = await self.socket.exchange(
            Opcode.GET_REACTIONS, req.to_payload(), parse_reactions_map
        )
        return unwrap(outcome, opcode=Opcode.GET_REACTIONS)

    async def set_reaction(
        self, chat_id: int, message_id: str, emoji: str
    ) -> MessageReactions | None:
        req = SetReactionRequest(chat_id=chat_id, message_id=message_id, emoji=emoji)
        outcome = await self.socket.exchange(
            Opcode.SET_REACTION, req.to_payload(), parse_reaction_info
        )
        return unwrap(outcome, opcode=Opcode.SET_REACTION)

    async def remove_reaction(self, chat_id: int, message_id: str) -> MessageReactions | None:
        req = RemoveReactionRequest(chat_id=chat_id, message_id=message_id)
        outcome = await self.socket.exchange(
            Opcode.REMOVE_REACTION, req.to_payload(), parse_reaction_info
        )
        return unwrap(outcome, opcode=Opcode.REMOVE_REACTION)

    # -- media -------------------------------------------------------------

    async def upload_photo(self, data: bytes, file_name: str) -> str:
        """
        Upload an image and return the photo token to attach to a message.

        The slot request goes over the socket; the file is POSTed to the returned
        URL over HTTPS.
        """

        try:
            outcome = await self.socket.request_upload_slot(count=1)
        except ProtocolShapeError as e:
            raise UploadSlotError(f"unexpected upload slot reply: {e}") from e
        if isinstance(outcome, ErrorPayload):
            raise UploadSlotError(outcome.message, code=outcome.error)
        return await self.uploader.upload(outcome.value.url, data, file_name)

    async def send_photo(
        self, chat_id: int, data: bytes, file_name: str, *, caption: str = ""
    ) -> SentMessage:
        token = await self.upload_photo(data, file_name)
        return await self.send_message(chat_id, MessageBuilder(caption).image(token))
