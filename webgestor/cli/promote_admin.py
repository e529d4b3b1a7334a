"""
webgestor-promote-admin: make an account an administrator, creating the
account first when it does not exist. Safe to run repeatedly.
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
        prog="webgestor-promote-admin",
        description="Promote (or create) an administrator account.",
    )
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Required when the account does not exist yet")
    parser.add_argument("--name", default="Admin")
    return parser


async def run(settings: Settings, email: str, password: str | None, name: str) -> int:
    async with running(settings, seed_admin=False) as runtime:
        user_id = None
        profile = runtime.data.get_user_by_email(email)
        if profile is not None:
            user_id = profile.id
        else:
            auth_user = await runtime.provider.find_user_by_email(email)
            if auth_user is None:
                if not password:
                    print(
                        "A password is required to create an account that does not "
                        "exist yet. Use --password.",
                        file=sys.stderr,
                    )
                    return 1
                auth_user = await runtime.provider.admin_create_user(
                    email, password, {"name": name}
                )
                print(f"Created auth account {auth_user.id}")
            user_id = auth_user.id

        await runtime.admin.promote(user_id, email=email.strip().lower(), name=name)
    print(f"User {email} promoted to admin (id={user_id})")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(Settings(), args.email, args.password, args.name))
    except WebGestorException as exc:
        print(f"Failed to promote admin [{exc.error_code}]: {exc.detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
