from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from perftrack.api.deps import get_db_session
from perftrack.api.main import app
from perftrack.core.auth import create_access_token
from perftrack.domain.services.skills import (
    get_active_skill_cache,
    list_active_skills,
    seed_skills,
)
from perftrack.infrastructure.db.base import Base


@pytest.fixture()
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Fresh SQLite database per test, with the skill catalog seeded."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'perftrack.db'}", future=True)
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    get_active_skill_cache().invalidate()
    async with factory() as session:
        await seed_skills(session)

    yield factory

    get_active_skill_cache().invalidate()
    await engine.dispose()


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the per-test database."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Provide a database session for tests that need direct DB access."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def skills(db: AsyncSession) -> list[dict[str, str]]:
    """Seeded active skills as ``{"id", "name"}`` dicts, ordered by name."""
    return [{"id": skill.id, "name": skill.name} for skill in await list_active_skills(db)]


@pytest.fixture()
def admin_token() -> str:
    return create_access_token("admin-user", roles=["admin"])


@pytest.fixture()
def employee_token() -> str:
    return create_access_token("employee-user", roles=["employee"])
