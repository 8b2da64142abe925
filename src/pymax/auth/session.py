from __future__ import annotations

import enum
from dataclasses import dataclass


class AuthState(enum.Enum):
    ANONYMOUS = "anonymous"
    CODE_REQUESTED = "code_requested"
    AUTHENTICATED = "authenticated"


@dataclass(slots=True)
class Session:
    """
    Identity of the logged-in account.

    `user_id` and `bearer_token` are only ever set together through
    `authenticate()`; there is no state where one is known without the other.
    """

    phone: str = ""
    user_id: int | None = None
    bearer_token: str | None = None
    verification_token: str | None = None
    state: AuthState = AuthState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    def code_requested(self, phone: str, verification_token: str) -> None:
        self.phone = phone
        self.verification_token = verification_token
        self.state = AuthState.CODE_REQUESTED

    def authenticate(self, *, bearer_token: str, user_id: int) -> None:
        self.bearer_token = bearer_token
        self.user_id = user_id
        self.verification_token = None
        self.state = AuthState.AUTHENTICATED
