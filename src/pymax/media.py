"""
Photo upload data plane.

The socket only hands out a signed URL (see `MaxSocket.request_upload_slot`);
the file itself goes to that URL as a multipart POST. The upload host answers
with its own JSON shape, decoded here separately from socket payloads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from .constants import DEFAULT_ORIGIN, DEFAULT_REFERER, DEFAULT_USER_AGENT
from .exceptions import PhotoUploadError, TransportError
from .schema.fields import SchemaMismatch
from .schema.upload import PhotoInfo, PhotoUploadErrorBody, PhotoUploadResult
from .util import json as framejson

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadConfig:
    origin: str = DEFAULT_ORIGIN
    referer: str = DEFAULT_REFERER
    user_agent: str = DEFAULT_USER_AGENT
    field_name: str = "file"
    content_type: str = "image/png"
    timeout_s: float = 30.0

    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Origin": self.origin,
            "Referer": self.referer,
        }


def decode_photo_upload_response(
    body: bytes, *, status_code: int | None = None
) -> PhotoUploadResult | PhotoUploadErrorBody:
    """Try the success shape first, then the upload host's error shape."""

    parsed = framejson.loads_object(body)
    if parsed is None:
        raise PhotoUploadError(
            f"upload response is not a JSON object: {body[:200]!r}", status_code=status_code
        )
    try:
        return PhotoUploadResult.from_body(parsed)
    except SchemaMismatch as e:
        mismatch = e
    err = PhotoUploadErrorBody.from_body(parsed)
    if err is None:
        raise PhotoUploadError(
            f"upload response matches neither success nor error shape ({mismatch})",
            status_code=status_code,
        )
    return err


def pick_photo(result: PhotoUploadResult) -> PhotoInfo:
    """
    The descriptor of a single-file upload.

    If the host ever returns several entries, the lexicographically smallest
    photo id wins so the choice does not depend on JSON key order.
    """

    if not result.photos:
        raise PhotoUploadError("upload response has no photos")
    if len(result.photos) > 1:
        logger.warning(
            "upload response has %d photos, using the smallest id", len(result.photos)
        )
    return result.photos[min(result.photos)]


class PhotoUploader:
    def __init__(
        self, config: UploadConfig | None = None, *, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self.config = config or UploadConfig()
        self._http = http_client
        self._owns_http = http_client is None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def post(self, url: str, data: bytes, file_name: str) -> httpx.Response:
        files = {self.config.field_name: (file_name, data, self.config.content_type)}
        try:
            return await self._client().post(
                url,
                files=files,
                headers=self.config.headers(),
                timeout=self.config.timeout_s,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"photo upload request failed: {e}") from e

    async def upload(self, url: str, data: bytes, file_name: str) -> str:
        """POST `data` to a slot URL and return the photo token."""

        resp = await self.post(url, data, file_name)
        outcome = decode_photo_upload_response(resp.content, status_code=resp.status_code)
        if isinstance(outcome, PhotoUploadErrorBody):
            raise PhotoUploadError(
                outcome.message,
                code=outcome.error,
                status_code=resp.status_code,
            )
        photo = pick_photo(outcome)
        logger.debug("uploaded photo %s", photo.photo_id)
        return photo.token

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None
