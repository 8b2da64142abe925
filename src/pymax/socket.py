from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from .connection.websocket import WebSocketConfig, WebSocketTransport
from .constants import DEFAULT_CHATS_COUNT, DEFAULT_WS_URL, SEQ_DEFAULT, SEQ_HELLO, Opcode
from .envelope import (
    Envelope,
    ErrorPayload,
    Success,
    SuccessParser,
    decode_envelope,
    decode_outcome,
    encode_envelope,
)
from .exceptions import TransportError
from .schema.chats import ChatSyncRequest, ChatsSnapshot
from .schema.upload import UploadSlot, UploadSlotRequest
from .socket_config import SocketConfig
from .util.events import AsyncEventEmitter

T = TypeVar("T")

logger = logging.getLogger(__name__)


class FrameTransport(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def connect(self) -> None: ...

    async def close(self) -> None: ...

    async def send(self, data: str) -> None: ...

    async def recv(self) -> str: ...


@dataclass(slots=True)
class ConnectionUpdate:
    connection: str  # "connecting" | "open" | "close"
    last_disconnect: BaseException | None = None


class MaxSocket:
    """
    The one persistent connection of a client.

    The protocol is half-duplex: a request is sent and exactly one reply frame is
    read before anything else may use the socket. `_io_lock` serializes connect
    and every send/receive pair so concurrent callers cannot interleave frames.
    No background reader exists; frames are only read by the caller waiting on
    its reply.
    """

    def __init__(self, *, config: SocketConfig, transport: FrameTransport | None = None) -> None:
        self.config = config
        self.events = AsyncEventEmitter()
        self._transport: FrameTransport = transport or WebSocketTransport(
            WebSocketConfig(
                url=config.ws_url or DEFAULT_WS_URL,
                origin=config.origin,
                connect_timeout_s=config.connect_timeout_s,
                extra_headers=config.headers,
            )
        )
        self._connected = False
        self._io_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected and self._transport.is_open

    async def connect(self) -> None:
        async with self._io_lock:
            if self._connected:
                # Reconnect: the old handle is dropped before a new one is opened.
                self._connected = False
                await self._close_transport()
            await self._connect_unlocked()

    async def ensure_connected(self) -> None:
        async with self._io_lock:
            await self._ensure_unlocked()

    async def close(self) -> None:
        """
        Best-effort teardown; never raises.

        Does not wait for an in-flight request, so it can be used to abandon a
        request whose reply never arrives.
        """

        was_connected = self._connected
        self._connected = False
        await self._close_transport()
        if was_connected:
            logger.info("disconnected from %s", self.config.ws_url)
            await self.events.emit("connection.update", ConnectionUpdate(connection="close"))

    async def request(
        self, opcode: int, payload: dict[str, Any], *, seq: int = SEQ_DEFAULT
    ) -> Envelope:
        """Send one envelope and return the next frame read from the socket."""

        async with self._io_lock:
            await self._ensure_unlocked()
            return await self._roundtrip(Envelope(opcode=opcode, payload=payload, seq=seq))

    async def exchange(
        self,
        opcode: int,
        payload: dict[str, Any],
        parse_success: SuccessParser[T],
        *,
        seq: int = SEQ_DEFAULT,
    ) -> Success[T] | ErrorPayload:
        reply = await self.request(opcode, payload, seq=seq)
        outcome = decode_outcome(reply.payload, parse_success, opcode=opcode)
        if isinstance(outcome, ErrorPayload):
            logger.warning(
                "opcode %s rejected by server: %s %s", opcode, outcome.error, outcome.message
            )
        return outcome

    async def chat_sync(
        self, token: str, *, chats_count: int = DEFAULT_CHATS_COUNT
    ) -> Success[ChatsSnapshot] | ErrorPayload:
        """
        Chat sync (opcode 19).

        Carries the bearer token in its payload, so it doubles as the check that
        a restored token is still accepted.
        """

        req = ChatSyncRequest(token=token, chats_count=chats_count)
        return await self.exchange(Opcode.CHAT_SYNC, req.to_payload(), ChatsSnapshot.from_payload)

    async def request_upload_slot(self, *, count: int = 1) -> Success[UploadSlot] | ErrorPayload:
        req = UploadSlotRequest(count=count)
        return await self.exchange(Opcode.UPLOAD_SLOT, req.to_payload(), UploadSlot.from_payload)

    async def _ensure_unlocked(self) -> None:
        if self.is_connected:
            return
        if self._connected:
            # Closed by the peer; the stale handle is dropped before reconnecting.
            logger.info("connection to %s was closed, reconnecting", self.config.ws_url)
            self._connected = False
            await self._close_transport()
        await self._connect_unlocked()

    async def _connect_unlocked(self) -> None:
        await self.events.emit("connection.update", ConnectionUpdate(connection="connecting"))
        await self._transport.connect()
        device_id = self.config.device_id or str(uuid.uuid4())
        hello = Envelope(
            opcode=Opcode.HELLO,
            payload=self.config.fingerprint.hello_payload(device_id),
            seq=SEQ_HELLO,
        )
        try:
            # The HELLO reply is read and dropped; only transport failures matter here.
            await self._send(hello)
            await self._recv_text()
        except BaseException as e:
            # Also on cancellation, so an unread HELLO reply is never taken for the next reply.
            await self._abort(e)
            raise
        self._connected = True
        logger.info("connected to %s", self.config.ws_url)
        await self.events.emit("connection.update", ConnectionUpdate(connection="open"))

    async def _abort(self, cause: BaseException) -> None:
        self._connected = False
        await self._close_transport()
        await self.events.emit(
            "connection.update", ConnectionUpdate(connection="close", last_disconnect=cause)
        )

    async def _close_transport(self) -> None:
        try:
            await self._transport.close()
        except Exception as e:
            logger.debug("ignoring error while closing socket: %s", e)

    async def _roundtrip(self, env: Envelope) -> Envelope:
        try:
            await self._send(env)
            text = await self._recv_text()
        except BaseException as e:
            # Also on cancellation: a reply still on the wire must never reach the next request.
            await self._abort(e)
            raise
        reply = decode_envelope(text)
        logger.debug("<- opcode=%s seq=%s", reply.opcode, reply.seq)
        if reply.opcode != env.opcode:
            logger.debug("reply opcode %s differs from request opcode %s", reply.opcode, env.opcode)
        await self.events.emit("frame.incoming", reply)
        return reply

    async def _send(self, env: Envelope) -> None:
        logger.debug("-> opcode=%s seq=%s", env.opcode, env.seq)
        await self.events.emit("frame.outgoing", env)
        await self._transport.send(encode_envelope(env))

    async def _recv_text(self) -> str:
        timeout_s = self.config.reply_timeout_s
        if timeout_s is None:
            return await self._transport.recv()
        try:
            return await asyncio.wait_for(self._transport.recv(), timeout=timeout_s)
        except TimeoutError as e:
            raise TransportError(f"no reply within {timeout_s}s") from e
