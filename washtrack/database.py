"""Database engine, session factory and request-scoped sessions."""

from typing import Any, AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from washtrack.config import Settings, get_settings

APPLICATION_NAME = "washtrack-reports"


class Base(DeclarativeBase):
    pass


def engine_options(settings: Settings) -> dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    On PostgreSQL the server also enforces the report query timeout, so a
    query abandoned by the executor does not keep running on the server.
    """
    options: dict[str, Any] = {"echo": settings.sql_echo, "future": True}
    if make_url(settings.postgres_url).get_backend_name() != "postgresql":
        return options

    options.update(pool_pre_ping=True, pool_recycle=1800)
    options["connect_args"] = {
        "server_settings": {
            "application_name": APPLICATION_NAME,
            "statement_timeout": str(settings.report_query_timeout_seconds * 1000),
        }
    }
    return options


settings = get_settings()
engine = create_async_engine(settings.postgres_url, **engine_options(settings))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; committed on success, rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create any missing tables (migrations remain the source of truth)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
