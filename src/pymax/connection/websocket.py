from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any

import websockets
from websockets.protocol import State

from ..constants import DEFAULT_ORIGIN
from ..exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WebSocketConfig:
    url: str
    origin: str = DEFAULT_ORIGIN
    connect_timeout_s: float = 20.0
    extra_headers: dict[str, str] = field(default_factory=dict)


class WebSocketTransport:
    """Single TLS WebSocket carrying UTF-8 JSON text frames."""

    def __init__(self, cfg: WebSocketConfig) -> None:
        self.cfg = cfg
        self._ws: Any | None = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._ws.state is State.OPEN

    async def connect(self) -> None:
        if self.is_open:
            return
        await self.close()
        try:
            connect_kwargs: dict[str, Any] = {
                "origin": self.cfg.origin,
                "max_size": None,
                "open_timeout": self.cfg.connect_timeout_s,
                # The service keeps its own session liveness; no WS-level pings.
                "ping_interval": None,
                "ping_timeout": None,
            }

            headers = self.cfg.extra_headers or None
            if headers is not None:
                # websockets>=15 renamed `extra_headers` -> `additional_headers`.
                params = inspect.signature(websockets.connect).parameters
                if "additional_headers" in params:
                    connect_kwargs["additional_headers"] = headers
                else:
                    connect_kwargs["extra_headers"] = headers

            self._ws = await asyncio.wait_for(
                websockets.connect(self.cfg.url, **connect_kwargs),
                timeout=self.cfg.connect_timeout_s,
            )
        except Exception as e:
            raise TransportError(f"failed to connect websocket: {e}") from e

    async def close(self) -> None:
        """Send a close frame. Errors are logged and dropped; the handle is always cleared."""

        if self._ws is None:
            return
        try:
            await self._ws.close()
        except Exception as e:
            logger.debug("ignoring websocket close error: %s", e)
        finally:
            self._ws = None

    async def send(self, data: str) -> None:
        if not self._ws:
            raise TransportError("websocket not connected")
        try:
            await self._ws.send(data)
        except Exception as e:
            raise TransportError(f"websocket send failed: {e}") from e

    async def recv(self) -> str:
        if not self._ws:
            raise TransportError("websocket not connected")
        msg: Any
        try:
            msg = await self._ws.recv()
        except Exception as e:
            raise TransportError(f"websocket recv failed: {e}") from e
        if isinstance(msg, str):
            return msg
        if isinstance(msg, bytes):
            try:
                return msg.decode("utf-8")
            except UnicodeDecodeError as e:
                raise TransportError("binary websocket frame is not UTF-8") from e
        raise TransportError(f"unexpected websocket message type: {type(msg).__name__}")
