# kaga_health/modules/patients/repository.py
from __future__ import annotations

from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.patients.models import Patient
from kaga_health.modules.users.models import User


async def get_by_id(session: AsyncSession, patient_id: UUID) -> Optional[Patient]:
    return await session.get(Patient, patient_id)


async def get_by_user_id(session: AsyncSession, user_id: UUID) -> Optional[Patient]:
    result = await session.execute(select(Patient).where(Patient.user_id == user_id))
    return result.scalar_one_or_none()


async def create_patient(session: AsyncSession, *, user_id: UUID, **fields: Any) -> Patient:
    patient = Patient(user_id=user_id, **fields)
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    return patient


async def list_patients_repo(
    session: AsyncSession,
    *,
    q: Optional[str],
    limit: int,
    offset: int,
) -> tuple[Sequence[Patient], int]:
    conditions = []
    if q:
        term = f"%{q.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(User.email).like(term),
                func.lower(User.first_name).like(term),
                func.lower(User.last_name).like(term),
            )
        )

    base = select(Patient).join(User, Patient.user_id == User.id).where(*conditions)
    total = (
        await session.execute(select(func.count()).select_from(base.subquery()))
    ).scalar_one()

    stmt = base.order_by(User.last_name, User.first_name, Patient.id).limit(limit).offset(offset)
    rows = (await session.execute(stmt)).scalars().all()
    return rows, total
