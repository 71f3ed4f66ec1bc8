# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Seed the database.

Usage:
    python -m zimlearn.infrastructure.database.seeds [--keep-existing]
        [--admin-email EMAIL --admin-password PASSWORD]

Only DATABASE_URL is required.
"""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from zimlearn.core.config.settings import DatabaseSettings
from zimlearn.infrastructure.database.connection import Database
from zimlearn.infrastructure.database.seeds.resources import seed_resources
from zimlearn.infrastructure.database.seeds.users import seed_admin_user

logger = logging.getLogger("zimlearn.seeds")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the ZimLearn database")
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Add the starter resources without deleting existing ones",
    )
    parser.add_argument("--skip-resources", action="store_true", help="Do not seed resources")
    parser.add_argument("--admin-email", help="Create or promote this admin account")
    parser.add_argument("--admin-password", help="Password for a new admin account")
    parser.add_argument("--admin-name", default="ZimLearn Admin")
    args = parser.parse_args(argv)

    if args.admin_email and not args.admin_password:
        parser.error("--admin-password is required with --admin-email")
    return args


async def run(settings: DatabaseSettings, args: argparse.Namespace) -> None:
    database = Database(settings)
    try:
        await database.connect(attempts=1)
        if settings.is_sqlite:
            await database.create_all()

        async with database.sessionmaker() as session:
            if not args.skip_resources:
                await seed_resources(session, replace=not args.keep_existing)
            if args.admin_email:
                await seed_admin_user(
                    session,
                    email=args.admin_email,
                    password=args.admin_password,
                    name=args.admin_name,
                )
    finally:
        await database.close()


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    args = parse_args(argv)

    try:
        settings = DatabaseSettings()
    except ValidationError as e:
        logger.error("Invalid database configuration: %s", str(e))
        sys.exit(1)

    asyncio.run(run(settings, args))


if __name__ == "__main__":
    main()
