"""
Alembic environment for the survey CRM schema.

The URL comes from DATABASE_URL when set (CI, one-off containers),
otherwise from database.yaml plus DB_PASSWORD. Online migrations run
through asyncpg like the application itself.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

# Importing the package registers every table on Base.metadata
from modules.backend.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_ASYNC_SCHEME = "postgresql+asyncpg://"


def migration_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if not url:
        from modules.backend.core.config import get_database_url

        return get_database_url(async_driver=True)
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return _ASYNC_SCHEME + url[len(scheme):]
    return url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL instead of executing it: `alembic upgrade head --sql`."""
    _configure(url=migration_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(migration_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_with_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
