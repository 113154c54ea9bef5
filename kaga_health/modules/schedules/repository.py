# kaga_health/modules/schedules/repository.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.schedules.models import WorkSchedule, WorkScheduleSlot


async def get_by_id(session: AsyncSession, schedule_id: UUID) -> Optional[WorkSchedule]:
    stmt = (
        select(WorkSchedule)
        .where(WorkSchedule.id == schedule_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_by_doctor(session: AsyncSession, doctor_id: UUID) -> Optional[WorkSchedule]:
    stmt = (
        select(WorkSchedule)
        .where(WorkSchedule.doctor_id == doctor_id)
        .execution_options(populate_existing=True)
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def list_schedules(
    session: AsyncSession, *, doctor_id: Optional[UUID] = None
) -> Sequence[WorkSchedule]:
    stmt = select(WorkSchedule).order_by(WorkSchedule.created_at.desc(), WorkSchedule.id)
    if doctor_id is not None:
        stmt = stmt.where(WorkSchedule.doctor_id == doctor_id)
    return (await session.execute(stmt)).scalars().all()


async def slots_for_day(session: AsyncSession, *, doctor_id: UUID, day: str) -> list[str]:
    stmt = (
        select(WorkScheduleSlot.slot)
        .join(WorkSchedule, WorkScheduleSlot.schedule_id == WorkSchedule.id)
        .where(WorkSchedule.doctor_id == doctor_id, WorkScheduleSlot.day == day)
        .order_by(WorkScheduleSlot.slot)
    )
    return list((await session.execute(stmt)).scalars().all())


async def has_slot(session: AsyncSession, *, doctor_id: UUID, day: str, slot: str) -> bool:
    stmt = select(
        exists().where(
            WorkScheduleSlot.schedule_id == WorkSchedule.id,
            WorkSchedule.doctor_id == doctor_id,
            WorkScheduleSlot.day == day,
            WorkScheduleSlot.slot == slot,
        )
    )
    return bool((await session.execute(stmt)).scalar())
