"""
webgestor-provision-admin: register a brand-new administrator account.
"""
from __future__ import annotations

import argparse
import asyncio
import sys

from webgestor.core.config import Settings
from webgestor.core.exceptions import WebGestorException
from webgestor.runtime import running


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webgestor-provision-admin",
        description="Register a new administrator account.",
    )
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default="Admin")
    return parser


async def run(settings: Settings, email: str, password: str, name: str) -> int:
    async with running(settings, seed_admin=False) as runtime:
        user_id = await runtime.admin.register_admin(email, password, name)
    print(f"Admin account created: {email} (id={user_id})")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(Settings(), args.email, args.password, args.name))
    except WebGestorException as exc:
        print(f"Error [{exc.error_code}]: {exc.detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
