"""
Database Truncation Script

Deletes every row from every table, children before parents so foreign
keys stay satisfied. Intended for local development resets.
Run from project root: python scripts/truncate_db.py --yes
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete

from qrmenu.core.config import get_settings
from qrmenu.database import Database
from qrmenu.models import Category, Dish, DishCategory, Restaurant, User

# Link table first, root table last
TRUNCATE_ORDER = [DishCategory, Dish, Category, Restaurant, User]


async def truncate_all(database: Database) -> dict[str, int]:
    """Delete all rows and return the number removed per table."""
    removed = {}
    async with database.session_maker() as session:
        async with session.begin():
            for model in TRUNCATE_ORDER:
                result = await session.execute(delete(model))
                removed[model.__tablename__] = result.rowcount
                print(f"   Deleted {result.rowcount:>5} rows from {model.__tablename__}")
    return removed


async def main(database_url: str) -> None:
    database = Database(database_url)
    try:
        print("=" * 60)
        print("🧹 Truncating all tables...")
        print("=" * 60)
        await truncate_all(database)
        print("✅ All tables truncated successfully.")
    finally:
        await database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Truncate all QR Menu tables")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    args = parser.parse_args()

    url = args.database_url or get_settings().database_url
    if not args.yes:
        answer = input(f"Delete ALL data in {url}? [y/N] ")
        if answer.strip().lower() != "y":
            print("Aborted.")
            sys.exit(1)

    asyncio.run(main(url))
