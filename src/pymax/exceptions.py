from __future__ import annotations


class PymaxError(Exception):
    """Base error for the pymax library."""


class TransportError(PymaxError):
    """WebSocket or HTTP transport-level failure."""


class ProtocolShapeError(PymaxError):
    """
    A reply did not have the expected shape.

    Raised when a frame is not a JSON envelope, when a payload matches neither
    the success nor the error schema of its opcode, or when a required nested
    field is missing.
    """

    def __init__(self, message: str, *, opcode: int | None = None) -> None:
        super().__init__(message)
        self.opcode = opcode


class ServerError(PymaxError):
    """The server answered with an explicit `{error, message}` payload."""

    def __init__(self, code: str, message: str, *, opcode: int | None = None) -> None:
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message
        self.opcode = opcode


class AuthError(ServerError):
    """Server error raised while starting auth or checking a verification code."""


class UploadError(PymaxError):
    """
    Photo upload failure.

    `phase` is `"slot"` for the socket request that issues the upload URL and
    `"upload"` for the HTTPS POST of the file itself.
    """

    phase: str = ""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(f"{code}: {message}" if code else message)
        self.code = code
        self.message = message


class UploadSlotError(UploadError):
    """The upload slot request was rejected or returned an unexpected payload."""

    phase = "slot"


class PhotoUploadError(UploadError):
    """The HTTPS upload was rejected or returned an unexpected body."""

    phase = "upload"

    def __init__(
        self, message: str, *, code: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class SessionAbsentError(PymaxError):
    """No bearer token is available for an operation that requires one."""
