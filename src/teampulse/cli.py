"""TeamPulse Command Line Interface.

Provides operational tools for:
- Schema creation
- Seeding the kudos tag catalog and starter budgets
- Bootstrapping user accounts

Usage:
    python -m teampulse.cli init-db
    python -m teampulse.cli seed-tags
    python -m teampulse.cli seed-budgets
    python -m teampulse.cli create-user --name "Ada" --email ada@example.com --password secret --role admin
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable

from teampulse.config import get_settings
from teampulse.database import create_schema, get_session, init_db
from teampulse.errors import AppError
from teampulse.models import UserRole
from teampulse.seed import seed_budgets, seed_tags
from teampulse.services.auth_service import AuthService


def parse_role(s: str) -> UserRole:
    """Parse a role name case-insensitively."""
    try:
        return UserRole(s.upper())
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid role: {s}")


class TeamPulseCli:
    """TeamPulse Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m teampulse.cli",
            description="TeamPulse operational tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create all database tables")
        subparsers.add_parser("seed-tags", help="Insert the default kudos tag catalog")
        subparsers.add_parser(
            "seed-budgets",
            help="Give every user without a budget a starter budget",
        )

        create_user = subparsers.add_parser("create-user", help="Create a user account")
        create_user.add_argument("--name", required=True, help="Display name")
        create_user.add_argument("--email", required=True, help="Login email")
        create_user.add_argument("--password", required=True, help="Initial password")
        create_user.add_argument("--department", help="Department")
        create_user.add_argument(
            "--role",
            type=parse_role,
            default=UserRole.USER,
            help="user, manager or admin (default: user)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        logging.basicConfig(level=get_settings().log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "init-db": self._cmd_init_db,
            "seed-tags": self._cmd_seed_tags,
            "seed-budgets": self._cmd_seed_budgets,
            "create-user": self._cmd_create_user,
        }

        handler = handlers.get(parsed.command)
        if handler:
            try:
                return asyncio.run(handler(parsed))
            except AppError as e:
                print(f"ERROR: {e.message}", file=sys.stderr)
                return 1

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        engine, _ = init_db()
        await create_schema(engine)
        print("Database schema created.")
        return 0

    async def _cmd_seed_tags(self, args: argparse.Namespace) -> int:
        async with get_session() as session:
            created = await seed_tags(session)
        for tag in created:
            print(f"  {tag.emoji} {tag.name}")
        print(f"Created {len(created)} tag(s).")
        return 0

    async def _cmd_seed_budgets(self, args: argparse.Namespace) -> int:
        async with get_session() as session:
            created = await seed_budgets(session)
        print(f"Created {len(created)} budget(s).")
        return 0

    async def _cmd_create_user(self, args: argparse.Namespace) -> int:
        async with get_session() as session:
            user = await AuthService(session, get_settings()).register(
                name=args.name,
                email=args.email,
                password=args.password,
                department=args.department,
                role=args.role,
            )
        print(f"Created {user.role} {user.email} ({user.id})")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = TeamPulseCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
