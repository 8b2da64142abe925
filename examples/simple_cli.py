"""
Simple interactive CLI for pymax.

Demonstrates:
- phone login or session restore from a token file
- listing chats and reading recent history
- sending text, photos and reactions
"""

from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import logging
import shlex
from pathlib import Path

from pymax import MaxClient, PymaxError
from pymax.app_logging import configure_logging

HELP = """commands:
  chats                        list chats
  history <chat_id> [count]    show recent messages
  send <chat_id> <text...>     send a text message
  photo <chat_id> <path> [caption...]
  react <chat_id> <message_id> <emoji>
  unreact <chat_id> <message_id>
  quit"""


async def _ainput(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


def _short(s: str | None, n: int = 80) -> str:
    if not s:
        return ""
    return s if len(s) <= n else (s[: n - 3] + "...")


def _ts(ms: int) -> str:
    return dt.datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


async def _run(client: MaxClient, line: str) -> bool:
    parts = shlex.split(line)
    if not parts:
        return True
    cmd, rest = parts[0], parts[1:]

    if cmd in ("quit", "exit"):
        return False
    if cmd == "chats":
        snapshot = await client.get_chats()
        for chat in snapshot.chats:
            last = chat.last_message.text if chat.last_message else ""
            print(f"{chat.id:>14}  {chat.chat_type:<8} {chat.title or '':<24} {_short(last, 40)}")
    elif cmd == "history" and rest:
        count = int(rest[1]) if len(rest) > 1 else 20
        for msg in await client.get_messages(int(rest[0]), backward=count):
            print(f"[{_ts(msg.time)}] {msg.sender} ({msg.id}): {_short(msg.text)}")
    elif cmd == "send" and len(rest) >= 2:
        sent = await client.send_message(int(rest[0]), " ".join(rest[1:]))
        print(f"sent {sent.message.id}")
    elif cmd == "photo" and len(rest) >= 2:
        path = Path(rest[1]).expanduser()
        data = await asyncio.to_thread(path.read_bytes)
        sent = await client.send_photo(int(rest[0]), data, path.name, caption=" ".join(rest[2:]))
        print(f"sent {sent.message.id}")
    elif cmd == "react" and len(rest) == 3:
        info = await client.set_reaction(int(rest[0]), rest[1], rest[2])
        print(f"reactions: {info.total_count if info else 0}")
    elif cmd == "unreact" and len(rest) == 2:
        await client.remove_reaction(int(rest[0]), rest[1])
    else:
        print(HELP)
    return True


async def main() -> None:
    ap = argparse.ArgumentParser(prog="simple_cli.py")
    ap.add_argument("--session", default="./pymax.session", help="token file")
    ap.add_argument("--phone", help="phone number to log in with if no session is saved")
    ap.add_argument("--debug", action="store_true", help="log every frame")
    args = ap.parse_args()

    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    client, restored = await MaxClient.from_token_file(args.session)
    async with client:
        if not restored:
            phone = args.phone or (await _ainput("Phone: ")).strip()
            await client.login(phone)

        print(HELP)
        while True:
            line = await _ainput("> ")
            try:
                if not await _run(client, line):
                    break
            except PymaxError as e:
                print(f"error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
