"""Alembic environment for the caisse schema."""
from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

# Racine du projet sur le PYTHONPATH (alembic lancé depuis n'importe où)
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from alembic import context
from sqlalchemy import create_engine, pool

from app.config import get_settings
from app.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def database_url() -> str:
    """URL forcée par l'appelant (tests) > DATABASE_URL > settings."""

    return (
        config.get_main_option("sqlalchemy.url")
        or os.getenv("DATABASE_URL")
        or get_settings().database_url
    )


def context_options(**extra) -> dict:
    options = dict(
        target_metadata=target_metadata,
        render_as_batch=True,  # ALTER TABLE sous SQLite
        compare_type=True,
    )
    options.update(extra)
    return options


def run_migrations_offline() -> None:
    context.configure(
        **context_options(url=database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(database_url(), poolclass=pool.NullPool, future=True)
    with connectable.connect() as connection:
        context.configure(**context_options(connection=connection))
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
