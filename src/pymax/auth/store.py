from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from ..constants import DEFAULT_SESSION_FILE

logger = logging.getLogger(__name__)


class TokenStore(Protocol):
    async def load(self) -> str | None: ...

    async def save(self, token: str) -> None: ...

    async def clear(self) -> None: ...


async def _read_text(path: Path) -> str:
    return await asyncio.to_thread(path.read_text, "utf-8")


async def _write_text(path: Path, data: str) -> None:
    await asyncio.to_thread(path.write_text, data, "utf-8")


async def _unlink(path: Path) -> None:
    await asyncio.to_thread(path.unlink, missing_ok=True)


class FileTokenStore:
    """
    Bearer token kept as a single plain-text file.

    A file that is missing or holds no readable non-blank text means there is
    no saved session; that is not an error.
    """

    def __init__(self, path: str | Path = DEFAULT_SESSION_FILE) -> None:
        self.path = Path(path).expanduser()
        self._lock = asyncio.Lock()

    async def load(self) -> str | None:
        async with self._lock:
            try:
                raw = await _read_text(self.path)
            except FileNotFoundError:
                return None
            except UnicodeDecodeError as e:
                logger.warning("ignoring unreadable session file %s: %s", self.path, e)
                return None
        token = raw.strip()
        return token or None

    async def save(self, token: str) -> None:
        token = token.strip()
        if not token:
            raise ValueError("refusing to save an empty token")
        async with self._lock:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
            await _write_text(self.path, token)
        logger.debug("saved session token to %s", self.path)

    async def clear(self) -> None:
        async with self._lock:
            await _unlink(self.path)
