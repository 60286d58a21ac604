from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.schema_check import ensure_tables
from app.db.session import Base


async def test_ensure_tables_creates_only_missing_tables() -> None:
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.tables["users"].create)

        created = await ensure_tables(engine)
        assert "users" not in created
        assert {"classes", "students", "schedules", "enrollments"} <= set(created)

        async with engine.connect() as conn:
            names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert set(Base.metadata.tables) <= set(names)

        assert await ensure_tables(engine) == []
    finally:
        await engine.dispose()
