"""
pymax: an asyncio client for the MAX messenger WebSocket API.

Phone/SMS login, token restore, chat sync, history, messages, reactions and
photo uploads over the web client's JSON envelope protocol.
"""

from __future__ import annotations

from .client import ClientConfig, MaxClient
from .exceptions import (
    AuthError,
    PhotoUploadError,
    ProtocolShapeError,
    PymaxError,
    ServerError,
    SessionAbsentError,
    TransportError,
    UploadError,
    UploadSlotError,
)
from .schema.messages import MessageBuilder

__all__ = [
    "AuthError",
    "ClientConfig",
    "MaxClient",
    "MessageBuilder",
    "PhotoUploadError",
    "ProtocolShapeError",
    "PymaxError",
    "ServerError",
    "SessionAbsentError",
    "TransportError",
    "UploadError",
    "UploadSlotError",
]

__version__ = "0.1.0"
