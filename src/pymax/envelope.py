"""
Envelope codec.

Every frame in both directions is a JSON object
`{ver, cmd, seq, opcode, payload}`. Replies carry no success/error tag: a
payload is a success if it parses against the opcode's success schema, an error
if it parses as `{error, message}`, and malformed otherwise. The success schema
is always tried first.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .constants import COMMAND, PROTOCOL_VERSION, SEQ_DEFAULT
from .exceptions import ProtocolShapeError, ServerError
from .schema.fields import SchemaMismatch
from .util import json as framejson

T = TypeVar("T")

SuccessParser = Callable[[dict[str, Any]], T]


@dataclass(frozen=True, slots=True)
class Envelope:
    opcode: int
    payload: dict[str, Any] = field(default_factory=dict)
    seq: int = SEQ_DEFAULT
    ver: int = PROTOCOL_VERSION
    cmd: int = COMMAND

    def to_dict(self) -> dict[str, Any]:
        return {
            "ver": self.ver,
            "cmd": self.cmd,
            "seq": self.seq,
            "opcode": int(self.opcode),
            "payload": self.payload,
        }


def encode_envelope(env: Envelope) -> str:
    return framejson.dumps(env.to_dict())


def decode_envelope(text: str | bytes) -> Envelope:
    obj = framejson.loads_object(text)
    if obj is None:
        raise ProtocolShapeError("frame is not a JSON object")

    header: dict[str, int] = {}
    for key in ("ver", "cmd", "seq", "opcode"):
        value = obj.get(key)
        if not isinstance(value, int) or isinstance(value, bool):
            raise ProtocolShapeError(f"frame field {key!r} missing or not an integer")
        header[key] = value

    payload = obj.get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProtocolShapeError("frame payload is not an object", opcode=header["opcode"])

    return Envelope(
        opcode=header["opcode"],
        payload=payload,
        seq=header["seq"],
        ver=header["ver"],
        cmd=header["cmd"],
    )


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """
    Socket-side error payload.

    `message` falls back to `localizedMessage`, which is what the auth
    endpoints send instead.
    """

    error: str
    message: str
    localized_message: str | None = None
    title: str | None = None

    def to_exception(
        self, exc_type: type[ServerError] = ServerError, *, opcode: int | None = None
    ) -> ServerError:
        return exc_type(self.error, self.message, opcode=opcode)


def parse_error_payload(payload: dict[str, Any]) -> ErrorPayload | None:
    code = payload.get("error")
    if not isinstance(code, str):
        return None
    message = payload.get("message")
    localized = payload.get("localizedMessage")
    if not isinstance(localized, str):
        localized = None
    if not isinstance(message, str):
        if localized is None:
            return None
        message = localized
    title = payload.get("title")
    return ErrorPayload(
        error=code,
        message=message,
        localized_message=localized,
        title=title if isinstance(title, str) else None,
    )


def decode_outcome(
    payload: dict[str, Any], parse_success: SuccessParser[T], *, opcode: int | None = None
) -> Success[T] | ErrorPayload:
    try:
        return Success(parse_success(payload))
    except SchemaMismatch as e:
        mismatch = e

    err = parse_error_payload(payload)
    if err is None:
        raise ProtocolShapeError(
            f"opcode {opcode} reply matches neither success nor error schema ({mismatch})",
            opcode=opcode,
        )
    return err


def unwrap(
    outcome: Success[T] | ErrorPayload,
    *,
    opcode: int | None = None,
    exc_type: type[ServerError] = ServerError,
) -> T:
    if isinstance(outcome, ErrorPayload):
        raise outcome.to_exception(exc_type, opcode=opcode)
    return outcome.value
