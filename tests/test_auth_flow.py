from __future__ import annotations

import pytest
from fakes import CHATS_PAYLOAD, FakeTransport

from pymax.auth import AuthFlow, AuthState, Session
from pymax.constants import Opcode
from pymax.exceptions import AuthError, ProtocolShapeError, ServerError, TransportError
from pymax.socket import MaxSocket

LOGIN_PAYLOAD = {
    "tokenAttrs": {"LOGIN": {"token": "AT1"}},
    "profile": {"contact": {"id": 42, "names": [{"name": "Ivan"}]}},
}


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def flow(sock: MaxSocket, session: Session) -> AuthFlow:
    return AuthFlow(sock, session)


@pytest.mark.asyncio
async def test_phone_login_authenticates_session(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    transport.reply({"token": "T1"})
    transport.reply(LOGIN_PAYLOAD)

    verification_token = await flow.start_auth("+79990000000")
    assert verification_token == "T1"
    assert session.state is AuthState.CODE_REQUESTED
    assert session.bearer_token is None
    assert session.user_id is None

    login = await flow.submit_code("T1", "123456")

    assert login.bearer_token == "AT1"
    assert login.user_id == 42
    assert session.state is AuthState.AUTHENTICATED
    assert (session.user_id, session.bearer_token) == (42, "AT1")
    assert session.phone == "+79990000000"
    assert session.verification_token is None


@pytest.mark.asyncio
async def test_auth_requests_match_wire_format(flow: AuthFlow, transport: FakeTransport) -> None:
    transport.reply({"token": "T1"})
    transport.reply(LOGIN_PAYLOAD)

    await flow.start_auth("+79990000000")
    await flow.submit_code("T1", " 123456\n")

    start, check = transport.requests
    assert (start["opcode"], start["seq"]) == (17, 3)
    assert start["payload"] == {"phone": "+79990000000", "type": "START_AUTH", "language": "ru"}
    assert (check["opcode"], check["seq"]) == (18, 1)
    assert check["payload"] == {
        "token": "T1",
        "verifyCode": "123456",
        "authTokenType": "CHECK_CODE",
    }


@pytest.mark.asyncio
async def test_rejected_phone_raises_auth_error(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    transport.reply({"error": "phone.invalid", "localizedMessage": "Неверный формат номера"})

    with pytest.raises(AuthError) as ei:
        await flow.start_auth("123")

    assert isinstance(ei.value, ServerError)
    assert ei.value.code == "phone.invalid"
    assert ei.value.message == "Неверный формат номера"
    assert ei.value.opcode == Opcode.START_AUTH
    assert session.state is AuthState.ANONYMOUS


@pytest.mark.asyncio
async def test_missing_verification_token_is_shape_error(
    flow: AuthFlow, transport: FakeTransport
) -> None:
    transport.reply({"requestMaxDuration": 60000})

    with pytest.raises(ProtocolShapeError):
        await flow.start_auth("+79990000000")


@pytest.mark.asyncio
async def test_wrong_code_raises_auth_error(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    transport.reply({"error": "verify.code.wrong", "message": "Wrong code"})

    with pytest.raises(AuthError, match="verify.code.wrong"):
        await flow.submit_code("T1", "000000")
    assert not session.is_authenticated


@pytest.mark.parametrize(
    "payload",
    [
        {"tokenAttrs": {"LOGIN": {}}, "profile": {"contact": {"id": 42}}},
        {"tokenAttrs": {"LOGIN": {"token": "AT1"}}, "profile": {"contact": {}}},
    ],
)
@pytest.mark.asyncio
async def test_login_reply_missing_nested_field_is_shape_error(
    flow: AuthFlow, session: Session, transport: FakeTransport, payload: dict
) -> None:
    transport.reply(payload)

    with pytest.raises(ProtocolShapeError):
        await flow.submit_code("T1", "123456")
    assert session.bearer_token is None
    assert session.user_id is None


@pytest.mark.asyncio
async def test_restore_session_accepted_when_probe_succeeds(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    transport.reply(CHATS_PAYLOAD)

    assert await flow.restore_session("AT1\n") is True

    probe = transport.requests[0]
    assert probe["opcode"] == Opcode.CHAT_SYNC
    assert probe["payload"]["token"] == "AT1"
    assert probe["payload"]["interactive"] is True
    assert probe["payload"]["chatsCount"] == 40
    assert session.state is AuthState.AUTHENTICATED
    assert (session.user_id, session.bearer_token) == (42, "AT1")


@pytest.mark.asyncio
async def test_restore_session_fails_when_probe_rejected(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    transport.reply({"error": "login.token", "message": "Invalid token"})

    assert await flow.restore_session("stale") is False
    assert session.state is AuthState.ANONYMOUS
    assert session.bearer_token is None


@pytest.mark.asyncio
async def test_restore_session_fails_on_transport_error(
    flow: AuthFlow, session: Session, transport: FakeTransport
) -> None:
    await flow.socket.connect()
    transport.fail_send = TransportError("websocket send failed: reset")

    assert await flow.restore_session("AT1") is False
    assert not session.is_authenticated


@pytest.mark.asyncio
async def test_restore_session_ignores_blank_token(
    flow: AuthFlow, transport: FakeTransport
) -> None:
    assert await flow.restore_session("   ") is False
    assert transport.sent == []
