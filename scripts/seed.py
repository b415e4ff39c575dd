#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Rolegate Contributors
"""Seed the root namespace, the system permissions and the default roles.

Usage:
    python scripts/seed.py
    python scripts/seed.py --root-name acme
    python scripts/seed.py --admin-id 42 --admin-username alice

Reads DATABASE_URL (and the other settings) from the environment or .env.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from rolegate.config import get_settings
from rolegate.db.session import get_engine, get_session_factory
from rolegate.models.user import User
from rolegate.repositories.membership_repository import MembershipRepository
from rolegate.repositories.user_repository import UserRepository
from rolegate.seed import seed_defaults


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--root-name",
        default=None,
        help="Name of the root namespace (default: ROOT_NAMESPACE_NAME setting)",
    )
    parser.add_argument("--admin-id", help="Principal id to bind to the admin role in the root")
    parser.add_argument("--admin-username", help="Username for --admin-id if the user is new")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    async with get_session_factory()() as session:
        result = await seed_defaults(session, args.root_name or settings.root_namespace_name)
        print(f"Root namespace: {result.root.full_path} ({result.root.id})")
        print(f"Permissions:    {len(result.permissions)}")
        print(f"Roles:          {', '.join(sorted(result.roles))}")

        if args.admin_id:
            users = UserRepository(session)
            user = await users.get_by_id(args.admin_id)
            if user is None:
                user = await users.create(
                    User(id=args.admin_id, username=args.admin_username or args.admin_id)
                )
            memberships = MembershipRepository(session)
            if not await memberships.exists(user.id, result.root.id):
                await memberships.create(user.id, result.root.id, result.roles["admin"].id)
            print(f"Admin:          {user.username} ({user.id})")

        await session.commit()

    await get_engine().dispose()


if __name__ == "__main__":
    asyncio.run(main())
