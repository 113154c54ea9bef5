# infra/migrations/env.py
"""
Alembic environment for kaga_health. Online migrations go through the same
async driver the app uses; offline mode only renders SQL.
"""
from __future__ import annotations

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from kaga_health.core.config import settings
from kaga_health.db.base import Base
import kaga_health.models  # noqa: F401  registers every table for autogenerate

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# alembic.ini leaves sqlalchemy.url blank; SQL_DSN fills it unless the caller set one
DSN = config.get_main_option("sqlalchemy.url") or settings.SQL_DSN


def _options() -> dict[str, Any]:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "compare_server_default": True,
        # SQLite cannot ALTER constraints in place
        "render_as_batch": DSN.startswith("sqlite"),
    }


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_options())
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    engine = create_async_engine(DSN, poolclass=pool.NullPool)
    try:
        async with engine.connect() as conn:
            await conn.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    context.configure(
        url=DSN,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(),
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate_online())
