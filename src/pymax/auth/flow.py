from __future__ import annotations

import logging

from ..constants import DEFAULT_CHATS_COUNT, DEFAULT_LANGUAGE, SEQ_DEFAULT, SEQ_START_AUTH, Opcode
from ..envelope import ErrorPayload, unwrap
from ..exceptions import AuthError, PymaxError
from ..schema.auth import CheckCodeRequest, CodeRequested, LoginResult, StartAuthRequest
from ..socket import MaxSocket
from .session import Session

logger = logging.getLogger(__name__)


class AuthFlow:
    """
    Phone login and token restore on top of the socket exchange.

    Anonymous -> CodeRequested (start_auth) -> Authenticated (submit_code).
    `restore_session` jumps straight to Authenticated when a chat sync made with
    the supplied token succeeds.
    """

    def __init__(
        self,
        socket: MaxSocket,
        session: Session,
        *,
        language: str = DEFAULT_LANGUAGE,
        chats_count: int = DEFAULT_CHATS_COUNT,
    ) -> None:
        self.socket = socket
        self.session = session
        self.language = language
        self.chats_count = chats_count

    async def start_auth(self, phone: str) -> str:
        """Ask the server to send a verification code to `phone`; returns the verification token."""

        req = StartAuthRequest(phone=phone, language=self.language)
        outcome = await self.socket.exchange(
            Opcode.START_AUTH, req.to_payload(), CodeRequested.from_payload, seq=SEQ_START_AUTH
        )
        requested = unwrap(outcome, opcode=Opcode.START_AUTH, exc_type=AuthError)

        self.session.code_requested(phone, requested.verification_token)
        logger.info("verification code requested")
        return requested.verification_token

    async def submit_code(self, verification_token: str, code: str) -> LoginResult:
        req = CheckCodeRequest(verification_token=verification_token, verify_code=code.strip())
        outcome = await self.socket.exchange(
            Opcode.CHECK_CODE, req.to_payload(), LoginResult.from_payload, seq=SEQ_DEFAULT
        )
        login = unwrap(outcome, opcode=Opcode.CHECK_CODE, exc_type=AuthError)
        self.session.authenticate(bearer_token=login.bearer_token, user_id=login.user_id)
        logger.info("authenticated as user %s", login.user_id)
        return login

    async def restore_session(self, bearer_token: str) -> bool:
        """
        Accept a stored token if a chat sync made with it succeeds.

        Any failure (server rejection, malformed reply, transport error) is
        reported as False: an invalid token and a transient failure are not told
        apart.
        """

        token = bearer_token.strip()
        if not token:
            return False
        try:
            outcome = await self.socket.chat_sync(token, chats_count=self.chats_count)
        except PymaxError as e:
            logger.warning("session restore probe failed: %s", e)
            return False
        if isinstance(outcome, ErrorPayload):
            logger.warning("session restore probe rejected: %s", outcome.error)
            return False

        self.session.authenticate(bearer_token=token, user_id=outcome.value.user_id)
        logger.info("restored session for user %s", outcome.value.user_id)
        return True

