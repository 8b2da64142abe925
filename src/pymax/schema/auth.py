from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_LANGUAGE
from .fields import SchemaMismatch, dig, req


@dataclass(frozen=True, slots=True)
class StartAuthRequest:
    phone: str
    language: str = DEFAULT_LANGUAGE
    auth_type: str = "START_AUTH"

    def to_payload(self) -> dict[str, Any]:
        return {"phone": self.phone, "type": self.auth_type, "language": self.language}


@dataclass(frozen=True, slots=True)
class CodeRequested:
    """Reply to START_AUTH: the token that pairs the upcoming code check with this request."""

    verification_token: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CodeRequested:
        return cls(verification_token=req(payload, "token", str))


@dataclass(frozen=True, slots=True)
class CheckCodeRequest:
    verification_token: str
    verify_code: str
    auth_token_type: str = "CHECK_CODE"

    def to_payload(self) -> dict[str, Any]:
        return {
            "token": self.verification_token,
            "verifyCode": self.verify_code,
            "authTokenType": self.auth_token_type,
        }


@dataclass(frozen=True, slots=True)
class LoginResult:
    bearer_token: str
    user_id: int
    profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> LoginResult:
        token = dig(payload, "tokenAttrs", "LOGIN", "token")
        if not isinstance(token, str) or not token:
            raise SchemaMismatch("field 'tokenAttrs.LOGIN.token' is not a non-empty string")
        user_id = dig(payload, "profile", "contact", "id")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise SchemaMismatch("field 'profile.contact.id' is not an integer")
        return cls(bearer_token=token, user_id=user_id, profile=payload["profile"])
