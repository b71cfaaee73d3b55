"""Async SQLAlchemy engine and session factory for the policy document store."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config import settings

ASYNC_DRIVER_PREFIX = "postgresql+asyncpg://"


def normalize_database_url(url: str) -> str:
    """Point plain PostgreSQL URLs at the asyncpg driver."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return ASYNC_DRIVER_PREFIX + url[len(prefix):]
    return url


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine; test runs get a NullPool so no connection outlives a loop."""
    options: dict[str, Any] = {
        "echo": settings.DATABASE_ECHO,
        "pool_pre_ping": True,
    }
    if settings.ENVIRONMENT == "test":
        options["poolclass"] = NullPool
    return create_async_engine(normalize_database_url(url), **options)


engine = build_engine(settings.DATABASE_URL)

# One session per repository call
SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)
