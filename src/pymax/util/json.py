from __future__ import annotations

import json
from typing import Any


def dumps(obj: Any) -> str:
    """Compact JSON for one text frame; non-ASCII text is sent as-is."""

    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


def loads_object(data: str | bytes) -> dict[str, Any] | None:
    """
    Parse JSON text that is expected to hold an object.

    Returns None when the text is not valid JSON or does not hold an object,
    so callers can raise the error that fits their context.
    """

    try:
        parsed = json.loads(data)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed
