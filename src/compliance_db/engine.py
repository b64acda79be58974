"""Async engine, session factory and connectivity check for assessments.

Every API call loads one assessment row, replays it through a
``NavigatorEngine`` and writes the row back, so a request holds a
connection only briefly and a small pool covers a busy server.

The engine is built on first use.  ``dispose_engine()`` releases the pool
and lets the next ``get_engine()`` build a fresh one (tests, app reload).
"""

import logging
import os

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from compliance_db.config import get_async_url

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _pool_options() -> dict:
    """Pool settings from PG_POOL_SIZE, PG_MAX_OVERFLOW and PG_ECHO."""
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
        # Rows are written back after every step; drop connections the
        # database closed while the server sat idle
        "pool_pre_ping": True,
        "echo": os.getenv("PG_ECHO", "").lower() in ("1", "true", "yes"),
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        options = _pool_options()
        _engine = create_async_engine(get_async_url(), **options)
        logger.info(
            "Assessment database engine created (pool_size=%d, max_overflow=%d)",
            options["pool_size"], options["max_overflow"],
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to :func:`get_engine`.

    ``expire_on_commit=False`` keeps assessment rows readable after the
    request's commit, when the route serializes them.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def ping_database() -> None:
    """Run ``SELECT 1``; raises whatever the driver raises when unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Assessment database engine disposed")
