"""
Database Engine and Sessions.

One async engine (asyncpg) per process, built on first use so importing
the application never needs config/.env. Requests get a session through
get_db_session; the taskiq worker and run.py open their own from
get_session_factory().
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from modules.backend.core.config import get_app_config, get_database_url
from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db = get_app_config().database
        _engine = create_async_engine(
            get_database_url(async_driver=True),
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
            pool_pre_ping=True,
            echo=db.echo,
            echo_pool=db.echo_pool,
        )
        logger.debug("Database engine created", extra={"host": db.host, "database": db.name})
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    return _session_factory


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Commits after the endpoint returns and rolls back if it raised, so all
    writes of one request (a lead with its survey, a whole cabling tree)
    land together or not at all.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Close pooled connections; safe to call when no engine was created."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None
