# subhub/db/session.py
from __future__ import annotations

"""
SubHub SL — Database engine & session dependencies

- One async engine per process, created lazily on first use so importing this
  module never opens a connection (tests inject their own factory).
- Repositories receive an `async_sessionmaker` rather than a session: reads
  that run concurrently (`asyncio.gather`) each need their own session.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from subhub.core.config import settings

logger = logging.getLogger(__name__)

_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine; pool knobs only apply to server databases."""
    if url.startswith("sqlite"):
        return create_async_engine(url, future=True, **kwargs)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=_POOL_RECYCLE,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=_POOL_TIMEOUT,
        future=True,
        **kwargs,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """FastAPI dependency returning the process-wide session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def db_healthcheck() -> bool:
    """Quick SELECT 1 (used by /readyz)."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None


__all__ = [
    "build_engine",
    "get_engine",
    "get_session_factory",
    "db_healthcheck",
    "dispose_engine",
]
