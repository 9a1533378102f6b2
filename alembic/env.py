from __future__ import annotations

import asyncio
from logging.config import fileConfig
from uuid import uuid4

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from orgdesk.config import settings
from orgdesk.database import Base

# Import models so metadata is fully populated for autogenerate.
from orgdesk.models import blog, lms, notes, organization, taxonomy  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    # The app settings win so migrations and the API always target one database.
    url = (settings.database_url or "").strip() or config.get_main_option("sqlalchemy.url", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not configured for Alembic migrations.")
    return url


def _configure(**kwargs) -> None:
    url = _database_url()
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place; batch mode rebuilds the table.
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = _database_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url

    connect_args = {}
    if url.startswith("postgresql+asyncpg://"):
        # PgBouncer poolers reject asyncpg's default numeric statement names.
        connect_args["prepared_statement_name_func"] = lambda: f"__alembic_{uuid4()}__"

    connectable = async_engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=connect_args,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(_run_sync)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
