from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .fields import SchemaMismatch, req


@dataclass(frozen=True, slots=True)
class UploadSlotRequest:
    count: int = 1

    def to_payload(self) -> dict[str, Any]:
        return {"count": self.count}


@dataclass(frozen=True, slots=True)
class UploadSlot:
    """Single-use signed URL for one HTTPS upload."""

    url: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> UploadSlot:
        url = req(payload, "url", str)
        if not url:
            raise SchemaMismatch("field 'url' is empty")
        return cls(url=url)


@dataclass(frozen=True, slots=True)
class PhotoInfo:
    photo_id: str
    token: str


@dataclass(frozen=True, slots=True)
class PhotoUploadResult:
    """Photo descriptors keyed by the server-assigned photo id."""

    photos: dict[str, PhotoInfo]

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> PhotoUploadResult:
        raw = req(body, "photos", dict)
        photos: dict[str, PhotoInfo] = {}
        for photo_id, info in raw.items():
            if not isinstance(info, dict):
                raise SchemaMismatch(f"photo {photo_id!r} is not an object")
            photos[photo_id] = PhotoInfo(photo_id=photo_id, token=req(info, "token", str))
        return cls(photos=photos)


@dataclass(frozen=True, slots=True)
class PhotoUploadErrorBody:
    """Error body of the upload host; not the socket error payload."""

    error: str
    message: str

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> PhotoUploadErrorBody | None:
        code = body.get("error")
        if not isinstance(code, str):
            return None
        message = body.get("message")
        if not isinstance(message, str):
            return None
        return cls(error=code, message=message)
