from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


class SchemaMismatch(ValueError):
    """A payload does not fit the schema it is being parsed against."""


def _type_ok(value: Any, typ: type | tuple[type, ...]) -> bool:
    # bool is an int subclass; JSON true/false never stands in for a number here.
    if isinstance(value, bool) and typ is not bool and not (
        isinstance(typ, tuple) and bool in typ
    ):
        return False
    return isinstance(value, typ)


def req(obj: dict[str, Any], key: str, typ: type[T]) -> T:
    if key not in obj:
        raise SchemaMismatch(f"missing field {key!r}")
    value = obj[key]
    if not _type_ok(value, typ):
        raise SchemaMismatch(
            f"field {key!r} has type {type(value).__name__}, expected {typ.__name__}"
        )
    return value


def opt(obj: dict[str, Any], key: str, typ: type[T], default: T | None = None) -> T | None:
    value = obj.get(key)
    if value is None:
        return default
    if not _type_ok(value, typ):
        raise SchemaMismatch(
            f"field {key!r} has type {type(value).__name__}, expected {typ.__name__}"
        )
    return value


def dig(obj: dict[str, Any], *path: str) -> Any:
    """Walk nested objects by key, raising SchemaMismatch with the dotted path on a miss."""

    cur: Any = obj
    for i, key in enumerate(path):
        if not isinstance(cur, dict) or key not in cur:
            raise SchemaMismatch(f"missing field {'.'.join(path[: i + 1])!r}")
        cur = cur[key]
    return cur


def obj_list(obj: dict[str, Any], key: str, *, required: bool = True) -> list[dict[str, Any]]:
    if key not in obj or obj[key] is None:
        if required:
            raise SchemaMismatch(f"missing field {key!r}")
        return []
    items = obj[key]
    if not isinstance(items, list):
        raise SchemaMismatch(f"field {key!r} is not a list")
    out: list[dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            raise SchemaMismatch(f"field {key!r} holds a non-object entry")
        out.append(item)
    return out
