from __future__ import annotations

import asyncio

import pytest
from fakes import FakeTransport

from pymax.constants import Opcode
from pymax.envelope import ErrorPayload, Success
from pymax.exceptions import ProtocolShapeError, TransportError
from pymax.schema.upload import UploadSlot
from pymax.socket import ConnectionUpdate, MaxSocket
from pymax.socket_config import DeviceFingerprint, SocketConfig


@pytest.mark.asyncio
async def test_connect_sends_hello_with_fingerprint_and_discards_reply(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()

    assert sock.is_connected
    assert transport.connects == 1
    assert len(transport.sent) == 1
    hello = transport.sent[0]
    assert hello["opcode"] == Opcode.HELLO
    assert (hello["ver"], hello["cmd"], hello["seq"]) == (11, 0, 0)
    assert hello["payload"]["deviceId"] == "dev-1"
    ua = hello["payload"]["userAgent"]
    assert ua["deviceType"] == "WEB"
    assert ua["appVersion"] == "4.8.42"
    assert ua["headerUserAgent"].startswith("Mozilla/5.0")
    assert transport.log == [("send", 6), ("recv", 6)]


@pytest.mark.asyncio
async def test_each_connect_generates_a_fresh_device_id() -> None:
    transport = FakeTransport()
    sock = MaxSocket(config=SocketConfig(), transport=transport)

    await sock.connect()
    await sock.connect()

    ids = [f["payload"]["deviceId"] for f in transport.sent]
    assert len(ids) == 2
    assert ids[0] != ids[1]
    assert transport.closes == 1


def test_fingerprint_hello_payload_has_single_generated_field() -> None:
    fp = DeviceFingerprint()
    a = fp.hello_payload("a")
    b = fp.hello_payload("b")
    assert a["userAgent"] == b["userAgent"]
    assert (a["deviceId"], b["deviceId"]) == ("a", "b")


@pytest.mark.asyncio
async def test_ensure_connected_is_idempotent(sock: MaxSocket, transport: FakeTransport) -> None:
    await sock.ensure_connected()
    await sock.ensure_connected()

    assert transport.connects == 1
    assert [f["opcode"] for f in transport.sent] == [6]


@pytest.mark.asyncio
async def test_request_connects_first(sock: MaxSocket, transport: FakeTransport) -> None:
    transport.reply({"url": "https://u"})

    reply = await sock.request(Opcode.UPLOAD_SLOT, {"count": 1})

    assert reply.payload == {"url": "https://u"}
    assert [f["opcode"] for f in transport.sent] == [6, 80]


@pytest.mark.asyncio
async def test_close_swallows_errors_and_clears_handle(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()
    transport.fail_close = True

    await sock.close()

    assert not sock.is_connected
    transport.fail_close = False
    transport.reply({"url": "https://u"})
    await sock.request(Opcode.UPLOAD_SLOT, {"count": 1})
    assert transport.connects == 2


@pytest.mark.asyncio
async def test_transport_failure_drops_connection(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()
    transport.fail_send = TransportError("websocket send failed: boom")

    with pytest.raises(TransportError):
        await sock.request(Opcode.UPLOAD_SLOT, {"count": 1})
    assert not sock.is_connected


@pytest.mark.asyncio
async def test_exchange_returns_typed_outcomes(sock: MaxSocket, transport: FakeTransport) -> None:
    transport.reply({"url": "https://u"})
    transport.reply({"error": "upload.limit", "message": "Too many uploads"})
    transport.reply({"what": "ever"})

    first = await sock.request_upload_slot()
    second = await sock.request_upload_slot()

    assert first == Success(UploadSlot(url="https://u"))
    assert second == ErrorPayload(error="upload.limit", message="Too many uploads")
    with pytest.raises(ProtocolShapeError):
        await sock.request_upload_slot()


@pytest.mark.asyncio
async def test_concurrent_requests_are_serialized(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()
    for i in range(3):
        transport.reply({"url": f"https://u/{i}"})

    results = await asyncio.gather(
        sock.request(Opcode.UPLOAD_SLOT, {"count": 1}),
        sock.request(Opcode.SET_REACTION, {"chatId": 1}),
        sock.request(Opcode.GET_REACTIONS, {"chatId": 1}),
    )

    # After the handshake every send is followed by its own receive.
    assert transport.log[2:] == [
        ("send", 80),
        ("recv", 80),
        ("send", 178),
        ("recv", 178),
        ("send", 180),
        ("recv", 180),
    ]
    assert [r.payload["url"] for r in results] == ["https://u/0", "https://u/1", "https://u/2"]


@pytest.mark.asyncio
async def test_reply_timeout_is_opt_in() -> None:
    transport = FakeTransport()
    sock = MaxSocket(config=SocketConfig(reply_timeout_s=0.05), transport=transport)
    await sock.connect()

    # Nothing scripted: the reply never arrives.
    with pytest.raises(TransportError, match="no reply"):
        await sock.request(Opcode.UPLOAD_SLOT, {"count": 1})
    assert not sock.is_connected


@pytest.mark.asyncio
async def test_connection_updates_are_emitted(sock: MaxSocket) -> None:
    seen: list[str] = []

    def on_update(update: ConnectionUpdate) -> None:
        seen.append(update.connection)

    sock.events.on("connection.update", on_update)
    await sock.connect()
    await sock.close()
    await sock.close()

    assert seen == ["connecting", "open", "close"]


@pytest.mark.asyncio
async def test_cancelled_request_drops_connection(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()

    # Nothing scripted, so the request waits for a reply until cancelled.
    pending = asyncio.create_task(sock.request(Opcode.UPLOAD_SLOT, {"count": 1}))
    while ("send", 80) not in transport.log:
        await asyncio.sleep(0)
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert not sock.is_connected
    assert transport.closes == 1

    # The abandoned reply shows up late; the next request must not receive it.
    transport.deliver({"url": "https://late"}, opcode=Opcode.UPLOAD_SLOT)
    transport.reply({"messagesReactions": {}})
    reply = await sock.request(Opcode.GET_REACTIONS, {"chatId": 1})

    assert transport.connects == 2
    assert reply.opcode == Opcode.GET_REACTIONS
    assert reply.payload == {"messagesReactions": {}}


@pytest.mark.asyncio
async def test_cancelled_connect_leaves_no_half_open_socket(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    transport.answer_hello = False

    pending = asyncio.create_task(sock.ensure_connected())
    while ("send", 6) not in transport.log:
        await asyncio.sleep(0)
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert not sock.is_connected
    assert transport.closes == 1

    transport.answer_hello = True
    await sock.ensure_connected()
    assert sock.is_connected
    assert transport.connects == 2
    assert transport.log[-2:] == [("send", 6), ("recv", 6)]


@pytest.mark.asyncio
async def test_socket_closed_by_server_is_reopened(
    sock: MaxSocket, transport: FakeTransport
) -> None:
    await sock.connect()
    transport.drop()

    assert not sock.is_connected

    transport.reply({"url": "https://u"})
    reply = await sock.request(Opcode.UPLOAD_SLOT, {"count": 1})

    assert reply.payload == {"url": "https://u"}
    assert transport.closes == 1
    assert transport.connects == 2
    assert [f["opcode"] for f in transport.sent] == [6, 6, 80]
