"""
Alembic Migration Environment
===============================

What:  Runs Alembic migrations through the async engine configuration.
Why:   Alembic must see the same database and metadata the app uses.
How:   The connection URL comes from gamecatalog.config (DATABASE_URL), not
       from alembic.ini; GameRecord is imported so ``--autogenerate`` sees
       the ``games`` table.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from gamecatalog.config import settings
from gamecatalog.database import Base
# Models must be imported to register with Base.metadata for --autogenerate
from gamecatalog.models.game import GameRecord  # noqa: F401

# Alembic Config object: access to alembic.ini values
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Metadata --autogenerate diffs against the live schema
target_metadata = Base.metadata

# DATABASE_URL from settings wins over alembic.ini (single source of truth)
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    """Run the migration steps in one transaction (shared by the async path)."""
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    # NullPool: a migration run opens one connection and exits
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Connect through asyncpg and apply pending migrations."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
