"""SQLAlchemy database session and engine configuration."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from course_api.config import get_settings


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy, not pysqlite, emit BEGIN so SAVEPOINTs work on SQLite."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_for(url: str, **kwargs: Any) -> AsyncEngine:
    """Build an async engine for ``url`` with the savepoint support the repositories need."""
    async_url = _get_async_url(url)
    is_sqlite = async_url.startswith("sqlite")
    if not is_sqlite and "poolclass" not in kwargs:
        settings = get_settings()
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_size", settings.db_pool_size)
        kwargs.setdefault("pool_timeout", settings.db_pool_timeout)

    engine = create_async_engine(async_url, future=True, **kwargs)
    if is_sqlite:
        _enable_sqlite_savepoints(engine)
    return engine


settings = get_settings()

engine = create_engine_for(
    settings.database_url,
    echo=(settings.app_env == "development"),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session per request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
