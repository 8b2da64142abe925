from __future__ import annotations

import asyncio
import contextlib
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

Listener = Callable[..., Awaitable[None]] | Callable[..., None]


class AsyncEventEmitter:
    """
    Minimal async-friendly event emitter.

    - `on(event, fn)` registers a listener (sync or async).
    - `emit(event, *args)` calls listeners in registration order, awaiting async ones.
    - `wait_for(event, timeout_s)` waits for the next emission of `event`.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._waiters: dict[str, list[asyncio.Future[Any]]] = defaultdict(list)

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        with contextlib.suppress(ValueError):
            listeners.remove(listener)

    async def emit(self, event: str, *args: Any) -> bool:
        any_triggered = False

        for fut in self._waiters.pop(event, []):
            if not fut.done():
                fut.set_result(args[0] if len(args) == 1 else args)
                any_triggered = True

        for listener in list(self._listeners.get(event, [])):
            any_triggered = True
            res = listener(*args)
            if asyncio.iscoroutine(res):
                await res

        return any_triggered

    async def wait_for(self, event: str, *, timeout_s: float | None = None) -> Any:
        fut: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._waiters[event].append(fut)
        try:
            if timeout_s is None:
                return await fut
            return await asyncio.wait_for(fut, timeout=timeout_s)
        finally:
            waiters = self._waiters.get(event)
            if waiters and fut in waiters:
                waiters.remove(fut)
