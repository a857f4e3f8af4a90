"""
Project Library Backend - Alembic Environment
==============================================

What:  Applies the project library schema: 001 creates identities, follows,
       messages, images, topics, projects and events; 002 adds posts and
       entries.
How:   DATABASE_URL from project_library settings wins over alembic.ini, so
       the API and its migrations always target the same database. Online
       runs go through the asyncpg engine via connection.run_sync(); SQLite
       (local and test databases) gets batch mode.
When:  `alembic upgrade head` before starting the API; `alembic revision
       --autogenerate` after changing project_library.models.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from project_library.config import settings
from project_library.database import Base

# Registers every table on Base.metadata for --autogenerate
import project_library.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Single source of truth for the connection URL
config.set_main_option("sqlalchemy.url", settings.database_url)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting to the database."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        # SQLite cannot ALTER constraints in place
        render_as_batch=connection.dialect.name == "sqlite",
        # Enum columns are VARCHARs; catch length changes on autogenerate
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # No pooling for one-shot migration runs
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
