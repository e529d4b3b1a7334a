"""
webgestor-diagnose: check that every collection can be read, and that a new
auth account gets its profile provisioned.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
import uuid

from webgestor.core.config import Settings
from webgestor.core.exceptions import WebGestorException
from webgestor.data.gateway import COLLECTIONS
from webgestor.runtime import Runtime, running


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webgestor-diagnose",
        description="Diagnose the WebGestor data store and profile provisioning.",
    )
    parser.add_argument(
        "--wait",
        type=float,
        default=None,
        help="Seconds to wait for the profile (default: PROFILE_WAIT_SECONDS)",
    )
    return parser


async def check_collections(runtime: Runtime) -> bool:
    print("1. Checking collections...")
    healthy = True
    for name in COLLECTIONS:
        try:
            rows = await runtime.gateway.load(name)
        except WebGestorException as exc:
            healthy = False
            print(f"   [fail] {name}: {exc.detail}", file=sys.stderr)
        else:
            print(f"   [ok]   {name} ({len(rows)} records)")
    return healthy


async def check_profile_provisioning(runtime: Runtime) -> bool:
    print("2. Checking profile provisioning...")
    email = f"diag_{uuid.uuid4().hex[:12]}@test.com"
    try:
        auth_user = await runtime.provider.sign_up(
            email, "password123", {"name": "Diagnostic User"}
        )
    except WebGestorException as exc:
        print(f"   [fail] could not create test account: {exc.detail}", file=sys.stderr)
        return False
    print(f"   [ok]   test account created: {auth_user.id}")

    try:
        profile = await runtime.auth.wait_for_profile(auth_user.id)
        if profile is None:
            print(
                "   [warn] no profile was created for the test account; "
                "provisioning is missing or failed",
                file=sys.stderr,
            )
        else:
            print(f"   [ok]   profile provisioned: {profile.name}")
    finally:
        await runtime.provider.admin_delete_user(auth_user.id)
        await runtime.data.delete_user(auth_user.id)
        print("   (test account removed)")
    return True


async def run(settings: Settings, wait: float | None) -> int:
    if wait is not None:
        settings = settings.model_copy(update={"PROFILE_WAIT_SECONDS": wait})
    print("--- WebGestor data store diagnostics ---")
    async with running(settings, seed_admin=False) as runtime:
        collections_ok = await check_collections(runtime)
        signup_ok = await check_profile_provisioning(runtime)
    print("--- Done ---")
    return 0 if collections_ok and signup_ok else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(Settings(), args.wait))
    except WebGestorException as exc:
        print(f"Error [{exc.error_code}]: {exc.detail}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
