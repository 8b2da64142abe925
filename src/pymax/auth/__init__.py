from __future__ import annotations

from .flow import AuthFlow
from .session import AuthState, Session
from .store import FileTokenStore, TokenStore

__all__ = [
    "AuthFlow",
    "AuthState",
    "FileTokenStore",
    "Session",
    "TokenStore",
]
