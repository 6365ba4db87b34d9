from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from perftrack.core.config import get_settings

# Driver-level connect refusals and statement timeouts are not wrapped by SQLAlchemy
STORAGE_ERRORS: tuple[type[BaseException], ...] = (SQLAlchemyError, OSError, TimeoutError)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def storage_connect_args(database_url: str, timeout_seconds: float) -> dict[str, Any]:
    """Driver arguments bounding both the connect handshake and each statement."""
    connect_args: dict[str, Any] = {"timeout": timeout_seconds}
    if make_url(database_url).get_driver_name() == "asyncpg":
        connect_args["command_timeout"] = timeout_seconds
    return connect_args


def _get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.async_database_url,
            echo=False,
            future=True,
            pool_pre_ping=True,
            pool_timeout=settings.database_timeout_seconds,
            connect_args=storage_connect_args(
                settings.async_database_url, settings.database_timeout_seconds
            ),
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            _get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session
