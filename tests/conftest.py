import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import date
from typing import AsyncGenerator, Awaitable, Callable, List, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.session import Base, get_db


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite DB per test; StaticPool keeps the single connection alive."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_teacher(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _make(name: str = "Ana Domingos", email: Optional[str] = None, **extra) -> dict:
        payload = {"name": name, "email": email or f"{uuid4().hex[:10]}@escola.ao", **extra}
        response = await client.post("/api/v1/teachers", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_student(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _make(first_name: str = "João", last_name: str = "Manuel da Silva", **extra) -> dict:
        payload = {
            "first_name": first_name,
            "last_name": last_name,
            "gender": "MASCULINO",
            "birth_date": date(2009, 3, 15).isoformat(),
            **extra,
        }
        response = await client.post("/api/v1/students", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_students(make_student) -> Callable[[int], Awaitable[List[dict]]]:
    async def _make(count: int) -> List[dict]:
        return [await make_student(first_name=f"Aluno{i:02d}") for i in range(count)]

    return _make


@pytest.fixture()
def make_subject(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _make(name: str = "Matemática", code: str = "MAT10", **extra) -> dict:
        response = await client.post("/api/v1/subjects", json={"name": name, "code": code, **extra})
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_class(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    async def _make(name: str = "10A", year: int = 2025, capacity: int = 30, **extra) -> dict:
        payload = {"name": name, "year": year, "shift": "MORNING", "capacity": capacity, **extra}
        response = await client.post("/api/v1/classes", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
