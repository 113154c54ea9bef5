from __future__ import annotations

import uuid

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.users.models import AuditLog


async def write_audit_log(
    session: AsyncSession,
    user_id: uuid.UUID | None,
    action: str,
    details: str | None = None,
) -> None:
    """
    Write an audit log entry inside the caller's transaction.

    action:
        "REGISTER"
        "CREATE_APPOINTMENT"
        "UPDATE_APPOINTMENT_STATUS"
        "CREATE_BOOKING"
        "DELETE_USER"
    """
    await session.execute(
        insert(AuditLog).values(user_id=user_id, action=action, details=details)
    )
