#!/usr/bin/env python3
"""
Database management script.
Creates, drops and resets the schema and seeds the first admin account.
"""

import asyncio
import sys
import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from estate_api.config import settings
from estate_api.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from estate_api.models.user import UserRole
from estate_api.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@example.com"


class MigrationManager:
    """Manages the database schema and initial data."""

    async def create_schema(self) -> None:
        logger.info(f"Creating tables on {settings.database_url.split('@')[-1]}")
        await create_tables()

    async def drop_schema(self) -> None:
        """Drop every table. Refused in production by drop_tables."""
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def seed_admin(
        self,
        email: str = DEFAULT_ADMIN_EMAIL,
        password: str = "admin123456",
        full_name: str = "System Administrator"
    ) -> None:
        """
        Create an admin account unless one with this email exists.

        Admins cannot register through the API, so this is how the first
        one is made.
        """
        async with AsyncSessionLocal() as session:
            user_repo = UserRepository(session)

            existing_admin = await user_repo.get_by_email(email)
            if existing_admin:
                logger.info(f"User {existing_admin.email} already exists, skipping seed")
                return

            admin_user = await user_repo.create_user({
                "email": email,
                "password": password,
                "full_name": full_name,
                "role": UserRole.ADMIN
            })

        logger.info(f"Admin user created: {admin_user.email} (ID: {admin_user.id})")
        if password == "admin123456":
            logger.warning("Please change the default admin password!")

    async def reset_database(self) -> None:
        """Reset the database by dropping and recreating all tables."""
        if not settings.is_development and not settings.is_testing:
            raise RuntimeError("Database reset is only allowed in development or testing")

        await self.drop_schema()
        await self.create_schema()
        await self.seed_admin()

        logger.info("Database reset completed")


async def run_command(args: argparse.Namespace) -> None:
    manager = MigrationManager()
    try:
        if args.command == "create":
            await manager.create_schema()

        elif args.command == "drop":
            await manager.drop_schema()

        elif args.command == "reset":
            await manager.reset_database()

        elif args.command == "seed-admin":
            await manager.seed_admin(
                email=args.email,
                password=args.password,
                full_name=args.full_name
            )
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Database management for the listings API")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping all data")

    reset_parser = subparsers.add_parser("reset", help="Drop, recreate and seed (development only)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    seed_parser = subparsers.add_parser("seed-admin", help="Create the initial admin account")
    seed_parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL, help="Admin email")
    seed_parser.add_argument("--password", default="admin123456", help="Admin password")
    seed_parser.add_argument("--full-name", default="System Administrator", help="Admin display name")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command in ("drop", "reset") and not args.confirm:
        print(f"Database {args.command} requires --confirm flag")
        return

    try:
        asyncio.run(run_command(args))
    except (SQLAlchemyError, OSError, RuntimeError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
