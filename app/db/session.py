from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings for the given URL. SQLite (tests, local runs) keeps the driver defaults."""
    options: Dict[str, Any] = {"echo": settings.sql_echo}
    if make_url(database_url).get_backend_name() != "sqlite":
        # Postgres may drop idle connections; ping before use and recycle after 5 minutes.
        options.update(pool_pre_ping=True, pool_recycle=300)
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request. Services commit explicitly; anything uncommitted is rolled back on close."""
    async with AsyncSessionLocal() as session:
        yield session
