"""Alembic environment for the electricity billing schema.

Usage:
  - alembic upgrade head
  - DATABASE_URL=postgresql://... alembic upgrade head

When invoked through :mod:`infrastructure.database.migration_runner` an
open connection is handed over in ``config.attributes["connection"]``.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from infrastructure.database.config import DatabaseSettings, get_database_url
from infrastructure.database.models import Base

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _database_url() -> str:
    raw = (
        os.environ.get("DATABASE_URL")
        or os.environ.get("APP_DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
    )
    return get_database_url(DatabaseSettings(DATABASE_URL=raw)) if raw else get_database_url()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode: emit SQL instead of executing it."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connection = config.attributes.get("connection")
    if connection is not None:
        context.configure(
            connection=connection, target_metadata=target_metadata, render_as_batch=True
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    connectable = create_engine(_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata, render_as_batch=True
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
