"""Migration runner for the busbooking schema.

The database URL is taken, in order, from ``alembic -x database_url=...``,
the ``sqlalchemy.url`` option of the config, or ``Settings().DATABASE_URL``.
"""
import asyncio
import os
import sys
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from busbooking.config import Settings
from busbooking.db.base import Base
import busbooking.models  # noqa: F401  registers tables on Base.metadata

config = context.config

if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("database_url")
    return url or config.get_main_option("sqlalchemy.url") or str(Settings().DATABASE_URL)


def _configure(database_url: str, **kwargs):
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline():
    url = _database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection, database_url: str):
    _configure(database_url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    url = _database_url()
    engine = create_async_engine(url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync, url)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
