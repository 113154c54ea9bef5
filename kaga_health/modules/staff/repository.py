# kaga_health/modules/staff/repository.py
from __future__ import annotations

from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.staff.models import MedicalStaff
from kaga_health.modules.users.models import User


async def get_by_id(session: AsyncSession, staff_id: UUID) -> Optional[MedicalStaff]:
    return await session.get(MedicalStaff, staff_id)


async def get_by_user_id(session: AsyncSession, user_id: UUID) -> Optional[MedicalStaff]:
    result = await session.execute(select(MedicalStaff).where(MedicalStaff.user_id == user_id))
    return result.scalar_one_or_none()


async def create_staff(session: AsyncSession, *, user_id: UUID, **fields: Any) -> MedicalStaff:
    staff = MedicalStaff(user_id=user_id, **fields)
    session.add(staff)
    await session.flush()
    await session.refresh(staff)
    return staff


async def list_staff_repo(
    session: AsyncSession,
    *,
    department: Optional[str],
    limit: int,
    offset: int,
) -> tuple[Sequence[MedicalStaff], int]:
    conditions = []
    if department:
        conditions.append(MedicalStaff.department == department)

    total = (
        await session.execute(select(func.count()).select_from(MedicalStaff).where(*conditions))
    ).scalar_one()

    stmt = (
        select(MedicalStaff)
        .join(User, MedicalStaff.user_id == User.id)
        .where(*conditions)
        .order_by(User.last_name, User.first_name, MedicalStaff.id)
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return rows, total


async def list_by_department(session: AsyncSession, department: str) -> Sequence[MedicalStaff]:
    """
    Doctors of a department in the order used for automatic assignment.
    """
    stmt = (
        select(MedicalStaff)
        .join(User, MedicalStaff.user_id == User.id)
        .where(MedicalStaff.department == department, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name, MedicalStaff.id)
    )
    return (await session.execute(stmt)).scalars().all()
