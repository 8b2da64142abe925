from __future__ import annotations

import asyncio
import sys


def _read_code(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline().strip()


async def prompt_verification_code(prompt: str = "Auth code: ") -> str:
    """Ask for the SMS verification code on stdin without blocking the event loop."""

    return await asyncio.to_thread(_read_code, prompt)
