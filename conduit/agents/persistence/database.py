"""
Async database engine and session factory.

Uses the SQLAlchemy 2.0 async engine. Every service receives the session
factory explicitly; nothing here is a module-level singleton.
"""

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .orm import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    # An in-memory SQLite database lives as long as its single connection
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return {"poolclass": StaticPool}
    return {"pool_pre_ping": True}


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for a database URL."""
    return create_async_engine(database_url, echo=echo, **_engine_options(database_url))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory services open their transactions from."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
    logger.info("Database engine disposed")
