# kaga_health/db/sql.py
from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from typing import Any

from fastapi import Request
from sqlalchemy import event, insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from kaga_health.core.config import settings
from kaga_health.core.security import InvalidTokenError, decode_token
from kaga_health.modules.users.models import AuditLog

logger = logging.getLogger("kaga_health.db")


def _engine_kwargs() -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
    return kwargs


engine = create_async_engine(settings.SQL_DSN, **_engine_kwargs())

if settings.is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE RESTRICT/CASCADE unless enabled per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
    class_=AsyncSession,
)


def _audit_user_id(request: Request) -> uuid.UUID | None:
    """
    Best-effort actor for the audit row: the `sub` of a valid bearer token.
    """
    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith("bearer "):
        return None
    try:
        payload = decode_token(auth.split(" ", 1)[1].strip())
        return uuid.UUID(str(payload["sub"]))
    except (InvalidTokenError, ValueError):
        return None


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Provide a DB session for each request.
    Commits on success, rolls back on error, and records the outcome in audit_logs.
    """
    user_id = _audit_user_id(request)
    action = f"{request.method} {request.url.path}"

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            try:
                await session.execute(
                    insert(AuditLog).values(
                        user_id=user_id,
                        action=f"{action} ROLLBACK",
                        details=str(exc) or exc.__class__.__name__,
                    )
                )
                await session.commit()
            except SQLAlchemyError:
                logger.exception("could not write rollback audit entry for %s", action)
            raise

        await session.execute(
            insert(AuditLog).values(
                user_id=user_id,
                action=f"{action} COMMIT",
                details="Operation completed successfully",
            )
        )
        await session.commit()


async def ping_db() -> bool:
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))
        return True


async def init_db(*, drop: bool = False) -> None:
    """
    Create every table registered on Base.metadata (dev / tests).
    Production schemas are managed by Alembic (infra/migrations).
    """
    from kaga_health.db.base import Base
    import kaga_health.models  # noqa: F401  registers all tables

    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
