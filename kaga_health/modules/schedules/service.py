# kaga_health/modules/schedules/service.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import ConflictError, NotFoundError, PermissionDenied, ValidationError
from kaga_health.modules.appointments.models import Appointment, ApptStatus
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.schedules import repository as schedules_repo
from kaga_health.modules.schedules.models import WorkSchedule, WorkScheduleSlot
from kaga_health.modules.schedules.schemas import (
    WEEKDAYS,
    DaySlots,
    OpenSlots,
    WorkScheduleCreate,
    WorkSchedulePublic,
    WorkScheduleUpdate,
    weekday_name,
)
from kaga_health.modules.staff.service import get_doctor_or_404, get_own_staff
from kaga_health.modules.users.models import User, UserRole

logger = logging.getLogger("kaga_health.schedules")


class ScheduleNotFound(NotFoundError):
    def __init__(self, code: str = "schedule_not_found"):
        super().__init__(code)


def to_public(schedule: WorkSchedule) -> WorkSchedulePublic:
    grouped: dict[str, list[str]] = {}
    for row in schedule.slots:
        grouped.setdefault(row.day, []).append(row.slot)
    return WorkSchedulePublic(
        id=schedule.id,
        doctor_id=schedule.doctor_id,
        available_slots=[
            DaySlots(day=day, slots=grouped[day]) for day in WEEKDAYS if day in grouped
        ],
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )


def _slot_rows(items: list[DaySlots]) -> list[WorkScheduleSlot]:
    return [
        WorkScheduleSlot(day=item.day, day_index=WEEKDAYS.index(item.day), slot=slot)
        for item in items
        for slot in item.slots
    ]


async def _ensure_owner_or_admin(session: AsyncSession, doctor_id: UUID, current_user: User) -> None:
    if current_user.role == UserRole.ADMIN.value:
        return
    own = await get_own_staff(session, current_user)
    if own is None or own.id != doctor_id:
        raise PermissionDenied("not_owner")


async def _get_or_404(session: AsyncSession, schedule_id: UUID) -> WorkSchedule:
    schedule = await schedules_repo.get_by_id(session, schedule_id)
    if not schedule:
        raise ScheduleNotFound()
    return schedule


async def create_schedule(
    session: AsyncSession, payload: WorkScheduleCreate, current_user: User
) -> WorkSchedulePublic:
    doctor_id: Optional[UUID] = payload.doctor_id
    if doctor_id is None:
        own = await get_own_staff(session, current_user)
        if own is None:
            raise ValidationError("doctor_id_required")
        doctor_id = own.id

    await get_doctor_or_404(session, doctor_id)
    await _ensure_owner_or_admin(session, doctor_id, current_user)

    if await schedules_repo.get_by_doctor(session, doctor_id):
        raise ConflictError("schedule_already_exists")

    schedule = WorkSchedule(doctor_id=doctor_id, slots=_slot_rows(payload.available_slots))
    session.add(schedule)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("schedule_already_exists") from exc

    await write_audit_log(session, current_user.id, "CREATE_WORK_SCHEDULE", f"doctor={doctor_id}")
    logger.info("work schedule published for doctor %s", doctor_id)
    return to_public(await _get_or_404(session, schedule.id))


async def list_schedules(session: AsyncSession, doctor_id: Optional[UUID] = None) -> list[WorkSchedulePublic]:
    rows = await schedules_repo.list_schedules(session, doctor_id=doctor_id)
    return [to_public(s) for s in rows]


async def get_schedule(session: AsyncSession, schedule_id: UUID) -> WorkSchedulePublic:
    return to_public(await _get_or_404(session, schedule_id))


async def get_schedule_for_doctor(session: AsyncSession, doctor_id: UUID) -> WorkSchedulePublic:
    await get_doctor_or_404(session, doctor_id)
    schedule = await schedules_repo.get_by_doctor(session, doctor_id)
    if not schedule:
        raise ScheduleNotFound()
    return to_public(schedule)


async def update_schedule(
    session: AsyncSession, schedule_id: UUID, payload: WorkScheduleUpdate, current_user: User
) -> WorkSchedulePublic:
    """
    Replace the published slots. Rows are diffed rather than recreated so
    the (schedule, day, slot) unique constraint never sees a transient duplicate.
    Existing appointments are left untouched.
    """
    schedule = await _get_or_404(session, schedule_id)
    await _ensure_owner_or_admin(session, schedule.doctor_id, current_user)

    wanted = {(row.day, row.slot): row for row in _slot_rows(payload.available_slots)}
    current = {(row.day, row.slot): row for row in schedule.slots}

    for key, row in current.items():
        if key not in wanted:
            schedule.slots.remove(row)
    for key, row in wanted.items():
        if key not in current:
            schedule.slots.append(row)
    schedule.updated_at = func.now()

    await session.flush()
    await write_audit_log(session, current_user.id, "UPDATE_WORK_SCHEDULE", f"schedule={schedule.id}")
    return to_public(await _get_or_404(session, schedule.id))


async def delete_schedule(session: AsyncSession, schedule_id: UUID, current_user: User) -> None:
    schedule = await _get_or_404(session, schedule_id)
    await _ensure_owner_or_admin(session, schedule.doctor_id, current_user)
    await session.delete(schedule)
    await session.flush()
    await write_audit_log(session, current_user.id, "DELETE_WORK_SCHEDULE", f"schedule={schedule_id}")


async def is_slot_published(session: AsyncSession, doctor_id: UUID, on: date, slot: str) -> bool:
    return await schedules_repo.has_slot(
        session, doctor_id=doctor_id, day=weekday_name(on), slot=slot
    )


async def open_slots(session: AsyncSession, doctor_id: UUID, on: date) -> OpenSlots:
    """
    Published slots for the weekday of `on` minus those already held by
    an active (non-cancelled) appointment.
    """
    await get_doctor_or_404(session, doctor_id)
    day = weekday_name(on)
    published = await schedules_repo.slots_for_day(session, doctor_id=doctor_id, day=day)

    taken_stmt = select(Appointment.slot).where(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == on,
        Appointment.status != ApptStatus.CANCELLED.value,
    )
    taken = set((await session.execute(taken_stmt)).scalars().all())

    return OpenSlots(
        doctor_id=doctor_id,
        for_date=on,
        day=day,
        slots=[s for s in published if s not in taken],
    )
