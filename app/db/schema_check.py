"""Create any missing tables. Run with: python -m app.db.schema_check"""

import asyncio
from typing import List

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

import app.core.models  # noqa: F401  (registers every table on Base.metadata)
from app.db.session import Base, engine


async def ensure_tables(db_engine: AsyncEngine) -> List[str]:
    """
    Ensure that all required tables exist in the connected database.
    Missing tables are created; existing ones are left untouched.
    Returns the names of the tables that were created.
    """
    async with db_engine.begin() as conn:
        existing = set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))
        missing = [name for name in Base.metadata.tables if name not in existing]
        # create_all orders by foreign-key dependency and skips existing tables
        await conn.run_sync(Base.metadata.create_all)
    return missing


async def main() -> None:
    missing = await ensure_tables(engine)
    if missing:
        print("Created missing tables: " + ", ".join(missing))
    else:
        print("All required tables already exist in the database.")


if __name__ == "__main__":
    asyncio.run(main())
