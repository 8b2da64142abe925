from __future__ import annotations

from enum import IntEnum

DEFAULT_WS_URL = "wss://ws-api.oneme.ru/websocket"
DEFAULT_ORIGIN = "https://web.max.ru"
DEFAULT_REFERER = "https://web.max.ru/"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:135.0) Gecko/20100101 Firefox/135.0"
)

PROTOCOL_VERSION = 11
COMMAND = 0

# Sequence numbers are fixed per call site as the web client sends them.
# Whether the server validates `seq` at all is unknown.
SEQ_HELLO = 0
SEQ_START_AUTH = 3
SEQ_DEFAULT = 1

DEFAULT_LANGUAGE = "ru"
DEFAULT_CHATS_COUNT = 40

# History requests default to this window when no `from` timestamp is given.
DEFAULT_HISTORY_WINDOW_MS = 9 * 60 * 60 * 1000

DEFAULT_SESSION_FILE = "pymax.session"


class Opcode(IntEnum):
    HELLO = 6
    START_AUTH = 17
    CHECK_CODE = 18
    CHAT_SYNC = 19
    FETCH_HISTORY = 49
    SEND_MESSAGE = 64
    UPLOAD_SLOT = 80
    SET_REACTION = 178
    REMOVE_REACTION = 179
    GET_REACTIONS = 180
