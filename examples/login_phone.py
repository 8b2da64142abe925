from __future__ import annotations

import argparse
import asyncio

from pymax import AuthError, MaxClient
from pymax.app_logging import configure_logging


async def main() -> None:
    ap = argparse.ArgumentParser(prog="login_phone.py")
    ap.add_argument("phone", help="phone number in international format, e.g. +79990000000")
    ap.add_argument("--session", default="./pymax.session", help="token file")
    args = ap.parse_args()

    configure_logging()

    client, restored = await MaxClient.from_token_file(args.session)
    async with client:
        if restored:
            print(f"session restored for user {client.session.user_id}")
            return
        try:
            login = await client.login(args.phone)
        except AuthError as e:
            print(f"login failed: {e.code}: {e.message}")
            return
        print(f"logged in as user {login.user_id}; token saved to {args.session}")


if __name__ == "__main__":
    asyncio.run(main())
