# kaga_health/modules/appointments/repository.py
from __future__ import annotations

from datetime import date
from typing import Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.appointments.models import Appointment, ApptStatus


async def get_by_id(session: AsyncSession, appointment_id: UUID) -> Optional[Appointment]:
    return await session.get(Appointment, appointment_id)


async def slot_taken(
    session: AsyncSession,
    *,
    doctor_id: UUID,
    on: date,
    slot: str,
    exclude_id: Optional[UUID] = None,
) -> bool:
    """True when an active appointment already holds (doctor, date, slot)."""
    cond = [
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == on,
        Appointment.slot == slot,
        Appointment.status != ApptStatus.CANCELLED.value,
    ]
    if exclude_id is not None:
        cond.append(Appointment.id != exclude_id)
    return bool((await session.execute(select(exists().where(*cond)))).scalar())


async def list_appointments_repo(
    session: AsyncSession,
    *,
    patient_id: Optional[UUID] = None,
    doctor_id: Optional[UUID] = None,
    status: Optional[str] = None,
    department: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 20,
    offset: int = 0,
) -> Tuple[Sequence[Appointment], int]:
    cond = []
    if patient_id is not None:
        cond.append(Appointment.patient_id == patient_id)
    if doctor_id is not None:
        cond.append(Appointment.doctor_id == doctor_id)
    if status:
        cond.append(Appointment.status == status)
    if department:
        cond.append(Appointment.department == department)
    if date_from is not None:
        cond.append(Appointment.appointment_date >= date_from)
    if date_to is not None:
        cond.append(Appointment.appointment_date <= date_to)

    total_stmt = select(func.count()).select_from(Appointment).where(*cond)
    total = (await session.execute(total_stmt)).scalar_one()

    stmt = (
        select(Appointment)
        .where(*cond)
        .order_by(Appointment.appointment_date, Appointment.slot, Appointment.id)
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return rows, total


async def doctor_has_active(session: AsyncSession, doctor_id: UUID) -> bool:
    """True when the doctor holds any appointment that is not Cancelled."""
    stmt = select(
        exists().where(
            Appointment.doctor_id == doctor_id,
            Appointment.status != ApptStatus.CANCELLED.value,
        )
    )
    return bool((await session.execute(stmt)).scalar())
