"""
Alembic Migration Environment
===============================

What:  Configures Alembic for the async SQLAlchemy engine and the
       users, platforms, affiliate_links and performance_metrics tables.
How:   Overrides default sync Alembic with async engine from our config.
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision).
When:  During migration operations (development and deployment).

The application can also create tables directly with `init_models()`
(CREATE_TABLES_ON_STARTUP=true); migrations are the production path.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from affiliate_tracker.config import settings
from affiliate_tracker.database import Base

# Import all models so Alembic can detect them for --autogenerate
from affiliate_tracker.models.affiliate_link import AffiliateLink  # noqa: F401
from affiliate_tracker.models.performance_metric import PerformanceMetric  # noqa: F401
from affiliate_tracker.models.platform import Platform  # noqa: F401
from affiliate_tracker.models.user import User  # noqa: F401

# Alembic Config object: provides access to .ini file values
config = context.config

# Setup logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Model metadata for --autogenerate
target_metadata = Base.metadata

# Database URL comes from Settings, not alembic.ini
config.set_main_option("sqlalchemy.url", settings.database_url)

# SQLite cannot ALTER most constraints in place; batch mode rebuilds the table
_is_sqlite = settings.database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=_is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,  # catches String length changes, e.g. url columns
        render_as_batch=_is_sqlite,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Apply pending migrations over an async connection.

    Alembic's migration context is synchronous, so the work is handed to
    connection.run_sync(). NullPool: the engine lives for one command only.
    """
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
